"""
Book library domain models.

Contains data structures for representing audiobooks and their files.
"""

from typing import NamedTuple, Optional


class Track(NamedTuple):
    """One playable audio file of a book.

    A track is identified by its position in the book's natural file order,
    so it carries no id of its own. ``source`` is whatever the engine
    adapter can open (a local path or a URI).
    """

    source: str
    name: str
    size: int = 0  # Byte length
    readable: bool = True
    duration_ms: Optional[int] = None  # Probed duration, if known


class Book(NamedTuple):
    """An audiobook: a name, a stable identity and its ordered tracks.

    ``identity`` is the folder/collection key used to persist progress.
    """

    name: str
    identity: str
    tracks: tuple[Track, ...]

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    @property
    def total_size(self) -> int:
        """Sum of track byte lengths."""
        return sum(track.size for track in self.tracks)

    @property
    def total_duration_ms(self) -> Optional[int]:
        """Sum of probed track durations, or None if any track is unknown."""
        total = 0
        for track in self.tracks:
            if track.duration_ms is None:
                return None
            total += track.duration_ms
        return total
