"""
Session snapshots - the persisted form of a session.

Payload keys are part of the stored format and must not change:
bookIdentity, currentTrackIndex, currentPositionMs, queueOrder,
queueCurrentIndex. The two queue keys may be absent in snapshots written
before queues were persisted.
"""

import json
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional

from loguru import logger

from .play_queue import identity_queue, is_valid_queue, position_of
from .state import SessionState


@dataclass(frozen=True)
class SessionSnapshot:
    """Saved progress for one book."""

    book_identity: str
    current_track_index: int
    position_ms: int
    queue_order: Optional[tuple[int, ...]] = None
    queue_cursor: Optional[int] = None

    @classmethod
    def from_state(cls, state: SessionState, position_ms: int) -> "SessionSnapshot":
        """Capture a session. position_ms is passed in because the live
        position belongs to the engine, not the state."""
        if state.book is None:
            raise ValueError("Cannot snapshot a session without a book")
        return cls(
            book_identity=state.book.identity,
            current_track_index=state.current_track_index,
            position_ms=max(0, position_ms),
            queue_order=tuple(state.queue),
            queue_cursor=state.queue_cursor,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "bookIdentity": self.book_identity,
            "currentTrackIndex": self.current_track_index,
            "currentPositionMs": self.position_ms,
        }
        if self.queue_order is not None:
            data["queueOrder"] = list(self.queue_order)
        if self.queue_cursor is not None:
            data["queueCurrentIndex"] = self.queue_cursor
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionSnapshot":
        """Build a snapshot from a stored payload.

        Raises:
            ValueError: If required keys are missing or mistyped
        """
        try:
            queue_order = data.get("queueOrder")
            queue_cursor = data.get("queueCurrentIndex")
            return cls(
                book_identity=str(data["bookIdentity"]),
                current_track_index=int(data["currentTrackIndex"]),
                position_ms=int(data["currentPositionMs"]),
                queue_order=tuple(queue_order) if queue_order is not None else None,
                queue_cursor=int(queue_cursor) if queue_cursor is not None else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid snapshot payload: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> Optional["SessionSnapshot"]:
        """Decode a stored payload; an undecodable payload counts as no snapshot."""
        try:
            data = json.loads(payload)
            if not isinstance(data, dict):
                raise ValueError("payload is not an object")
            return cls.from_dict(data)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable snapshot: {e}")
            return None


class RestoredPosition(NamedTuple):
    """Where a resumed session starts."""

    queue: list[int]
    queue_cursor: int
    track_index: int
    position_ms: int
    queue_restored: bool


def restore_position(snapshot: SessionSnapshot, track_count: int) -> RestoredPosition:
    """Apply the resume rules to a snapshot for a book of track_count tracks.

    The track index is clamped into the book and the position to >= 0. A
    valid saved queue is restored with its cursor clamped; otherwise the
    identity queue is used with the cursor on the saved track. The track
    index is then taken from under the cursor, so the result always
    satisfies track_index == queue[queue_cursor].
    """
    if track_count <= 0:
        raise ValueError("Cannot restore a snapshot into an empty book")

    track_index = min(max(snapshot.current_track_index, 0), track_count - 1)
    position_ms = max(snapshot.position_ms, 0)

    if snapshot.queue_order is not None and is_valid_queue(
        snapshot.queue_order, track_count
    ):
        queue = list(snapshot.queue_order)
        cursor = min(max(snapshot.queue_cursor or 0, 0), len(queue) - 1)
        restored = True
    else:
        queue = identity_queue(track_count)
        cursor = position_of(queue, track_index)
        restored = False

    if queue[cursor] != track_index:
        logger.debug(
            f"Snapshot track {track_index} disagrees with queue[{cursor}]={queue[cursor]}, "
            f"using the queue"
        )

    return RestoredPosition(
        queue=queue,
        queue_cursor=cursor,
        track_index=queue[cursor],
        position_ms=position_ms,
        queue_restored=restored,
    )
