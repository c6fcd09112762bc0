"""
Change notifications for the UI surface.

A session has at most one listener. Notifications are fire-and-forget: no
listener is fine, and a listener that raises is logged and ignored.
"""

import threading
from typing import Optional

from loguru import logger

# Prefix of the name passed to on_file_changed when a track failed to load
ERROR_MARKER = "ERROR: "


class SessionListener:
    """Receives session changes. Override the notifications you need."""

    def on_progress(self, position_ms: int, duration_ms: int) -> None:
        pass

    def on_file_changed(self, track_index: int, name: str) -> None:
        """A track was loaded, or failed (name starts with ERROR_MARKER)."""

    def on_playback_state_changed(self, is_playing: bool) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass

    def on_queue_changed(self, queue: list[int], cursor: int) -> None:
        pass


class ChangeNotifier:
    """Single-subscriber outbound channel."""

    def __init__(self) -> None:
        self._listener: Optional[SessionListener] = None
        self._lock = threading.Lock()

    @property
    def listener(self) -> Optional[SessionListener]:
        return self._listener

    def subscribe(self, listener: SessionListener) -> None:
        """Attach a listener, replacing any previous one."""
        with self._lock:
            self._listener = listener

    def unsubscribe(self, listener: Optional[SessionListener] = None) -> None:
        """Detach the listener. With an argument, only if it is the current one."""
        with self._lock:
            if listener is None or self._listener is listener:
                self._listener = None

    def _dispatch(self, method: str, *args) -> None:
        with self._lock:
            listener = self._listener
        if listener is None:
            return
        try:
            getattr(listener, method)(*args)
        except Exception:
            logger.exception(f"Session listener failed in {method}")

    def progress(self, position_ms: int, duration_ms: int) -> None:
        self._dispatch("on_progress", position_ms, duration_ms)

    def file_changed(self, track_index: int, name: str) -> None:
        self._dispatch("on_file_changed", track_index, name)

    def file_failed(self, track_index: int, detail: str) -> None:
        self._dispatch("on_file_changed", track_index, f"{ERROR_MARKER}{detail}")

    def playback_state_changed(self, is_playing: bool) -> None:
        self._dispatch("on_playback_state_changed", is_playing)

    def error(self, message: str) -> None:
        self._dispatch("on_error", message)

    def queue_changed(self, queue: list[int], cursor: int) -> None:
        self._dispatch("on_queue_changed", list(queue), cursor)
