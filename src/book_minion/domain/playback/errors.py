"""Playback error taxonomy.

Only EmptyBookError reaches callers of the controller. Everything else is
absorbed at the controller boundary and reported through notifications.
"""


class PlaybackError(Exception):
    """Base class for playback session errors."""


class EmptyBookError(PlaybackError):
    """Book has no tracks."""


class TrackUnavailableError(PlaybackError):
    """Track file is missing or unreadable."""


class EngineLoadError(PlaybackError):
    """Engine could not open or decode a track."""


class EngineRuntimeError(PlaybackError):
    """Engine failed after a track was loaded."""


class InvalidIndexError(PlaybackError, IndexError):
    """Queue position or track index out of range."""
