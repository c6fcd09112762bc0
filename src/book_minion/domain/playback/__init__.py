"""Playback domain - the listening session and everything it drives.

This domain handles:
- The playback session controller (transport, queue edits, engine events)
- Play queue edits and cursor bookkeeping
- Session snapshots and their persistence
- mpv engine handles via JSON IPC
- Progress ticking and the sleep timer
"""

# Controller
from .controller import SKIP_MS, PlaybackSessionController, SessionPresenter

# Engine
from .engine import (
    EngineAdapter,
    EngineFactory,
    MpvEngine,
    check_mpv_available,
    get_mpv_property,
    mpv_engine_factory,
    send_mpv_command,
)

# Errors
from .errors import (
    EmptyBookError,
    EngineLoadError,
    EngineRuntimeError,
    InvalidIndexError,
    PlaybackError,
    TrackUnavailableError,
)

# Notifications
from .notifier import ERROR_MARKER, ChangeNotifier, SessionListener

# Queue
from .play_queue import (
    identity_queue,
    insert_entry,
    is_valid_queue,
    move_entry,
    position_of,
    remove_entry,
)

# Persistence
from .snapshot import RestoredPosition, SessionSnapshot, restore_position
from .store import SessionStore, SqliteSessionStore

# State
from .state import PlaybackStatus, SessionState

# Timers
from .sleep_timer import SleepTimer
from .ticker import ProgressTicker

__all__ = [
    # Controller
    "SKIP_MS",
    "PlaybackSessionController",
    "SessionPresenter",
    # Engine
    "EngineAdapter",
    "EngineFactory",
    "MpvEngine",
    "check_mpv_available",
    "get_mpv_property",
    "mpv_engine_factory",
    "send_mpv_command",
    # Errors
    "EmptyBookError",
    "EngineLoadError",
    "EngineRuntimeError",
    "InvalidIndexError",
    "PlaybackError",
    "TrackUnavailableError",
    # Notifications
    "ERROR_MARKER",
    "ChangeNotifier",
    "SessionListener",
    # Queue
    "identity_queue",
    "insert_entry",
    "is_valid_queue",
    "move_entry",
    "position_of",
    "remove_entry",
    # Persistence
    "RestoredPosition",
    "SessionSnapshot",
    "restore_position",
    "SessionStore",
    "SqliteSessionStore",
    # State
    "PlaybackStatus",
    "SessionState",
    # Timers
    "SleepTimer",
    "ProgressTicker",
]
