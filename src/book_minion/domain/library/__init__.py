"""Library domain - books, tracks and their display names.

This domain handles:
- Track and Book models
- Building a book from an explicit, ordered list of files
- Custom book display names
- Time formatting for positions
"""

from .metadata import (
    book_from_paths,
    format_time,
    is_uri,
    parse_time,
    probe_duration_ms,
    track_from_source,
)
from .models import Book, Track
from .names import BookNameStore

__all__ = [
    "Book",
    "Track",
    "BookNameStore",
    "book_from_paths",
    "format_time",
    "is_uri",
    "parse_time",
    "probe_duration_ms",
    "track_from_source",
]
