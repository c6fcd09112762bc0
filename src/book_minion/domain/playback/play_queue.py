"""
Play queue operations.

The queue is a list of track indices in playback order; the cursor is the
queue position of the loaded track. Every function here is pure: it takes
the current queue and cursor and returns new ones, leaving the inputs
untouched. The cursor rules keep the loaded track's entry under the cursor
for every edit that doesn't target that entry.
"""

from typing import Sequence

from .errors import InvalidIndexError


def identity_queue(track_count: int) -> list[int]:
    """Default queue: every track once, in natural file order."""
    return list(range(track_count))


def is_valid_queue(queue: Sequence[int] | None, track_count: int) -> bool:
    """Check a persisted queue can be restored for a book of track_count tracks.

    A restorable queue is non-empty, has one entry per track and only
    references existing tracks.
    """
    if not queue or len(queue) != track_count:
        return False
    return all(
        isinstance(entry, int) and not isinstance(entry, bool) and 0 <= entry < track_count
        for entry in queue
    )


def _check_position(queue: Sequence[int], position: int, label: str) -> None:
    if not 0 <= position < len(queue):
        raise InvalidIndexError(
            f"{label} {position} out of range for queue of {len(queue)}"
        )


def move_entry(
    queue: Sequence[int], cursor: int, from_position: int, to_position: int
) -> tuple[list[int], int]:
    """Move the entry at from_position so it ends up at to_position.

    This is an array move (remove then insert), not a swap.

    Returns:
        (new_queue, new_cursor)

    Raises:
        InvalidIndexError: If either position is out of range
    """
    _check_position(queue, from_position, "from_position")
    _check_position(queue, to_position, "to_position")

    new_queue = list(queue)
    entry = new_queue.pop(from_position)
    new_queue.insert(to_position, entry)

    if from_position == cursor:
        new_cursor = to_position
    elif from_position < cursor <= to_position:
        new_cursor = cursor - 1
    elif to_position <= cursor < from_position:
        new_cursor = cursor + 1
    else:
        new_cursor = cursor

    return new_queue, new_cursor


def remove_entry(
    queue: Sequence[int], cursor: int, position: int
) -> tuple[list[int], int]:
    """Remove the entry at position.

    If the loaded entry itself is removed, the cursor becomes
    min(cursor, len(new_queue) - 2), never below 0; the caller must reload
    the track now under the cursor.

    Returns:
        (new_queue, new_cursor)

    Raises:
        InvalidIndexError: If position is out of range, or the queue would
            become empty
    """
    _check_position(queue, position, "position")
    if len(queue) <= 1:
        raise InvalidIndexError("Cannot remove the last entry of the queue")

    new_queue = list(queue)
    del new_queue[position]

    if position == cursor:
        new_cursor = max(0, min(cursor, len(new_queue) - 2))
    elif position < cursor:
        new_cursor = cursor - 1
    else:
        new_cursor = cursor

    return new_queue, new_cursor


def insert_entry(
    queue: Sequence[int],
    cursor: int,
    track_index: int,
    track_count: int,
    position: int = -1,
) -> tuple[list[int], int]:
    """Insert track_index into the queue.

    A position of -1 (or past the end) appends. Duplicates are allowed: the
    same track may occupy several queue slots.

    Returns:
        (new_queue, new_cursor)

    Raises:
        InvalidIndexError: If track_index isn't a track of the book, or
            position is negative (other than -1)
    """
    if not 0 <= track_index < track_count:
        raise InvalidIndexError(
            f"track_index {track_index} out of range for book of {track_count}"
        )
    if position < -1:
        raise InvalidIndexError(f"position {position} is not a queue position")

    new_queue = list(queue)
    new_cursor = cursor

    if position == -1 or position >= len(new_queue):
        new_queue.append(track_index)
    else:
        new_queue.insert(position, track_index)
        if position <= cursor:
            new_cursor = cursor + 1

    return new_queue, new_cursor


def position_of(queue: Sequence[int], track_index: int) -> int:
    """Queue position of the first entry for track_index, or 0 if absent."""
    try:
        return list(queue).index(track_index)
    except ValueError:
        return 0
