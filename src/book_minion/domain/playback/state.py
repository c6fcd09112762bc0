"""
Playback session state.

The authoritative in-memory record of what is loaded and where. Owned by
exactly one PlaybackSessionController.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from book_minion.domain.library.models import Book


class PlaybackStatus(Enum):
    """Controller state machine states."""

    EMPTY = "empty"  # No book loaded
    LOADING = "loading"  # Track being opened
    PAUSED = "paused"
    PLAYING = "playing"
    ERROR = "error"  # Current track failed; session still addressable


@dataclass
class SessionState:
    """Book, queue, position and play status of one session.

    ``current_track_index`` mirrors ``queue[queue_cursor]`` and is
    recomputed by ``sync_current_track()`` after every queue/cursor change.
    """

    book: Optional[Book] = None
    queue: list[int] = field(default_factory=list)
    queue_cursor: int = 0
    current_track_index: int = 0
    position_ms: int = 0
    is_playing: bool = False
    status: PlaybackStatus = PlaybackStatus.EMPTY

    def sync_current_track(self) -> None:
        """Recompute current_track_index from the queue and cursor."""
        if self.queue:
            self.current_track_index = self.queue[self.queue_cursor]

    @property
    def has_next(self) -> bool:
        return self.queue_cursor < len(self.queue) - 1

    @property
    def has_previous(self) -> bool:
        return self.queue_cursor > 0
