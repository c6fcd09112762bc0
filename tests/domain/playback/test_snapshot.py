"""Tests for session snapshots and the resume rules."""

import json

import pytest

from book_minion.domain.playback.snapshot import SessionSnapshot, restore_position
from book_minion.domain.playback.state import SessionState

from fakes import make_book


class TestSnapshotFormat:
    """Tests for the stored payload format."""

    def test_from_state(self) -> None:
        state = SessionState(book=make_book(3), queue=[2, 0, 1], queue_cursor=1)
        state.sync_current_track()

        snapshot = SessionSnapshot.from_state(state, 4200)

        assert snapshot == SessionSnapshot("/books/dune", 0, 4200, (2, 0, 1), 1)

    def test_from_state_without_book(self) -> None:
        with pytest.raises(ValueError):
            SessionSnapshot.from_state(SessionState(), 0)

    def test_payload_keys(self) -> None:
        snapshot = SessionSnapshot("/books/dune", 1, 3000, (1, 0), 0)

        assert json.loads(snapshot.to_json()) == {
            "bookIdentity": "/books/dune",
            "currentTrackIndex": 1,
            "currentPositionMs": 3000,
            "queueOrder": [1, 0],
            "queueCurrentIndex": 0,
        }

    def test_old_payload_without_queue(self) -> None:
        """Test snapshots written before queues were saved still load."""
        payload = '{"bookIdentity": "/books/dune", "currentTrackIndex": 2, "currentPositionMs": 10}'

        snapshot = SessionSnapshot.from_json(payload)

        assert snapshot == SessionSnapshot("/books/dune", 2, 10)
        assert "queueOrder" not in snapshot.to_dict()

    @pytest.mark.parametrize(
        "payload",
        ["not json", "[1, 2]", '{"bookIdentity": "/books/dune"}', '{"bookIdentity": "x", "currentTrackIndex": "a", "currentPositionMs": 0}'],
    )
    def test_unreadable_payload_is_no_snapshot(self, payload) -> None:
        assert SessionSnapshot.from_json(payload) is None


class TestRestorePosition:
    """Tests for turning a snapshot into a starting point."""

    def test_valid_queue_restored(self) -> None:
        snapshot = SessionSnapshot("/books/dune", 0, 500, (1, 2, 0), 2)

        restored = restore_position(snapshot, 3)

        assert restored.queue == [1, 2, 0]
        assert restored.queue_cursor == 2
        assert restored.track_index == 0
        assert restored.position_ms == 500
        assert restored.queue_restored is True

    def test_cursor_is_clamped_and_wins(self) -> None:
        """Test an out-of-range cursor is clamped and decides the track."""
        snapshot = SessionSnapshot("/books/dune", 0, 0, (1, 2, 0), 7)

        restored = restore_position(snapshot, 3)

        assert restored.queue_cursor == 2
        assert restored.track_index == 0

    def test_missing_cursor_defaults_to_first_entry(self) -> None:
        snapshot = SessionSnapshot("/books/dune", 2, 0, (1, 2, 0), None)

        restored = restore_position(snapshot, 3)

        assert restored.queue_cursor == 0
        assert restored.track_index == 1

    def test_invalid_queue_uses_identity(self) -> None:
        snapshot = SessionSnapshot("/books/dune", 1, 0, (0, 5, 1), 0)

        restored = restore_position(snapshot, 3)

        assert restored.queue == [0, 1, 2]
        assert restored.queue_cursor == 1
        assert restored.track_index == 1
        assert restored.queue_restored is False

    def test_track_and_position_clamped(self) -> None:
        snapshot = SessionSnapshot("/books/dune", -4, -100)

        restored = restore_position(snapshot, 3)

        assert restored.track_index == 0
        assert restored.queue_cursor == 0
        assert restored.position_ms == 0

    def test_round_trip(self) -> None:
        """Test a saved session resumes exactly where it was."""
        state = SessionState(book=make_book(4), queue=[3, 1, 0, 2], queue_cursor=2)
        state.sync_current_track()
        snapshot = SessionSnapshot.from_json(SessionSnapshot.from_state(state, 9100).to_json())

        restored = restore_position(snapshot, 4)

        assert restored.queue == [3, 1, 0, 2]
        assert restored.queue_cursor == 2
        assert restored.track_index == 0
        assert restored.position_ms == 9100

    def test_empty_book(self) -> None:
        with pytest.raises(ValueError):
            restore_position(SessionSnapshot("/books/dune", 0, 0), 0)
