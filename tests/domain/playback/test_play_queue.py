"""Tests for play queue edits and cursor bookkeeping."""

import itertools

import pytest

from book_minion.domain.playback.errors import InvalidIndexError
from book_minion.domain.playback.play_queue import (
    identity_queue,
    insert_entry,
    is_valid_queue,
    move_entry,
    position_of,
    remove_entry,
)


class TestIdentityQueue:
    def test_natural_order(self) -> None:
        assert identity_queue(3) == [0, 1, 2]

    def test_empty(self) -> None:
        assert identity_queue(0) == []


class TestIsValidQueue:
    """Tests for deciding whether a saved queue can be restored."""

    @pytest.mark.parametrize(
        "queue",
        [[0, 1, 2], [2, 0, 1], [1, 1, 1]],
    )
    def test_valid(self, queue) -> None:
        assert is_valid_queue(queue, 3) is True

    @pytest.mark.parametrize(
        "queue",
        [None, [], [0, 1], [0, 1, 2, 0], [0, 1, 3], [0, -1, 2], [0, 1, "2"], [0, True, 2]],
    )
    def test_invalid(self, queue) -> None:
        assert is_valid_queue(queue, 3) is False


class TestMoveEntry:
    """Tests for reordering (array move, not swap)."""

    def test_move_across_cursor_decrements(self) -> None:
        """Test moving an earlier entry past the cursor."""
        assert move_entry([0, 1, 2], 1, 0, 2) == ([1, 2, 0], 0)

    def test_move_across_cursor_increments(self) -> None:
        assert move_entry([0, 1, 2], 1, 2, 0) == ([2, 0, 1], 2)

    def test_move_current_entry(self) -> None:
        assert move_entry([0, 1, 2], 0, 0, 2) == ([1, 2, 0], 2)

    def test_move_after_cursor_leaves_cursor(self) -> None:
        assert move_entry([0, 1, 2, 3], 0, 1, 3) == ([0, 2, 3, 1], 0)

    def test_move_to_same_position(self) -> None:
        assert move_entry([0, 1, 2], 1, 1, 1) == ([0, 1, 2], 1)

    def test_loaded_track_never_changes(self) -> None:
        """Test every (from, to, cursor) keeps the loaded track under the cursor."""
        queue = [3, 0, 4, 1, 2]
        for from_position, to_position, cursor in itertools.product(range(5), repeat=3):
            new_queue, new_cursor = move_entry(queue, cursor, from_position, to_position)
            assert new_queue[new_cursor] == queue[cursor]
            assert sorted(new_queue) == sorted(queue)

    def test_input_is_not_modified(self) -> None:
        queue = [0, 1, 2]
        move_entry(queue, 0, 0, 2)
        assert queue == [0, 1, 2]

    @pytest.mark.parametrize("from_position,to_position", [(-1, 0), (0, 3), (3, 0)])
    def test_out_of_range(self, from_position, to_position) -> None:
        with pytest.raises(InvalidIndexError):
            move_entry([0, 1, 2], 0, from_position, to_position)


class TestRemoveEntry:
    """Tests for removing queue entries."""

    def test_remove_current_entry_clamps_cursor(self) -> None:
        assert remove_entry([0, 1, 2], 1, 1) == ([0, 2], 0)

    def test_remove_first_current_entry(self) -> None:
        assert remove_entry([0, 1, 2], 0, 0) == ([1, 2], 0)

    def test_remove_last_current_entry(self) -> None:
        assert remove_entry([0, 1, 2, 3], 3, 3) == ([0, 1, 2], 1)

    def test_remove_before_cursor(self) -> None:
        assert remove_entry([0, 1, 2], 2, 0) == ([1, 2], 1)

    def test_remove_after_cursor(self) -> None:
        assert remove_entry([0, 1, 2], 0, 2) == ([0, 1], 0)

    def test_cursor_always_valid(self) -> None:
        for length in range(2, 6):
            queue = identity_queue(length)
            for cursor, position in itertools.product(range(length), repeat=2):
                new_queue, new_cursor = remove_entry(queue, cursor, position)
                assert len(new_queue) == length - 1
                assert 0 <= new_cursor < len(new_queue)
                if position != cursor:
                    assert new_queue[new_cursor] == queue[cursor]

    def test_refuses_to_empty_queue(self) -> None:
        with pytest.raises(InvalidIndexError):
            remove_entry([0], 0, 0)

    def test_out_of_range(self) -> None:
        with pytest.raises(InvalidIndexError):
            remove_entry([0, 1], 0, 2)


class TestInsertEntry:
    """Tests for adding tracks to the queue."""

    def test_append(self) -> None:
        assert insert_entry([0, 1, 2], 1, 0, 3) == ([0, 1, 2, 0], 1)

    def test_position_past_end_appends(self) -> None:
        assert insert_entry([0, 1, 2], 1, 2, 3, position=10) == ([0, 1, 2, 2], 1)

    def test_insert_at_cursor_shifts_cursor(self) -> None:
        assert insert_entry([0, 1, 2], 1, 2, 3, position=1) == ([0, 2, 1, 2], 2)

    def test_insert_after_cursor(self) -> None:
        assert insert_entry([0, 1, 2], 0, 2, 3, position=1) == ([0, 2, 1, 2], 0)

    @pytest.mark.parametrize("track_index", [-1, 3])
    def test_invalid_track(self, track_index) -> None:
        with pytest.raises(InvalidIndexError):
            insert_entry([0, 1, 2], 0, track_index, 3)

    def test_invalid_position(self) -> None:
        with pytest.raises(InvalidIndexError):
            insert_entry([0, 1, 2], 0, 1, 3, position=-2)


class TestPositionOf:
    def test_first_occurrence(self) -> None:
        assert position_of([2, 0, 1, 0], 0) == 1

    def test_missing_track_is_zero(self) -> None:
        assert position_of([2, 1], 0) == 0
