"""
Track and book construction from explicit file lists.

Reads what the session needs (size, readability, duration) from each file
using Mutagen. Directory discovery and chapter sorting are left to the
caller: files are kept in the order they are given.
"""

import os
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import urlparse

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

from .models import Book, Track


def is_uri(source: str) -> bool:
    """Check whether a source is a URI rather than a local path."""
    scheme = urlparse(source).scheme
    # Single letters are Windows drive prefixes, not schemes
    return len(scheme) > 1


def probe_duration_ms(local_path: str) -> Optional[int]:
    """Read the audio duration of a file, or None if it can't be determined."""
    try:
        audio_file = MutagenFile(local_path)
    except (MutagenError, OSError) as e:
        logger.debug(f"Could not probe {local_path}: {e}")
        return None

    if audio_file is None or not hasattr(audio_file, "info"):
        return None

    length = getattr(audio_file.info, "length", None)
    if not length:
        return None
    return int(length * 1000)


def track_from_source(source: str) -> Track:
    """Build a Track from a local path or URI.

    URI sources are assumed readable; the engine reports a load error if
    they turn out not to be.
    """
    if is_uri(source):
        name = Path(urlparse(source).path).name or source
        return Track(source=source, name=name)

    path = Path(source).expanduser()
    readable = path.is_file() and os.access(path, os.R_OK)

    try:
        size = path.stat().st_size if readable else 0
    except OSError:
        size = 0

    return Track(
        source=str(path),
        name=path.name,
        size=size,
        readable=readable,
        duration_ms=probe_duration_ms(str(path)) if readable else None,
    )


def book_from_paths(paths: Sequence[str], name: Optional[str] = None) -> Book:
    """Build a Book from an ordered list of files.

    The book identity is the resolved parent folder of the first file, so
    the same folder always maps to the same saved progress.

    Args:
        paths: Audio files in playback order
        name: Display name (default: the folder name)

    Returns:
        Book with one Track per path (empty if no paths are given)
    """
    tracks = tuple(track_from_source(p) for p in paths)

    if not tracks:
        return Book(name=name or "Untitled", identity="", tracks=())

    first = tracks[0].source
    if is_uri(first):
        parsed = urlparse(first)
        identity = f"{parsed.scheme}://{parsed.netloc}{Path(parsed.path).parent}"
        default_name = Path(parsed.path).parent.name
    else:
        folder = Path(first).resolve().parent
        identity = str(folder)
        default_name = folder.name

    unreadable = [t.name for t in tracks if not t.readable]
    if unreadable:
        logger.warning(f"{len(unreadable)} unreadable file(s) in book: {unreadable}")

    return Book(name=name or default_name or "Untitled", identity=identity, tracks=tracks)


def format_time(milliseconds: int) -> str:
    """Format a position in milliseconds as m:ss, or h:mm:ss past an hour."""
    if milliseconds < 0:
        milliseconds = 0

    total_seconds = milliseconds // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def parse_time(value: str) -> int:
    """Parse "h:mm:ss", "m:ss" or a plain number of seconds into milliseconds.

    Raises:
        ValueError: If the value isn't a valid time
    """
    parts = value.strip().split(":")
    if not parts or len(parts) > 3 or any(not p.strip() for p in parts):
        raise ValueError(f"Invalid time: '{value}'")

    total = 0.0
    for part in parts:
        number = float(part)
        if number < 0:
            raise ValueError(f"Invalid time: '{value}'")
        total = total * 60 + number
    return int(total * 1000)
