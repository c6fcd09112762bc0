"""
Periodic progress ticker.

Wakes up every interval while a session is playing and hands the epoch it
was started with back to the controller, which discards ticks from an
epoch that is no longer current.
"""

import threading
from typing import Callable, Optional

from loguru import logger

TickCallback = Callable[[int], None]


class ProgressTicker:
    """Background ticker bound to one controller.

    Each start() spawns a fresh thread with its own stop event, so a
    stopped generation can never be resumed by a later start().
    """

    def __init__(self, callback: TickCallback, interval: float = 1.0) -> None:
        self.callback = callback
        self.interval = interval
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, epoch: int) -> None:
        """Start ticking for epoch, stopping any previous generation."""
        self.stop()
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(epoch, stop_event),
            name=f"progress-ticker-{epoch}",
            daemon=True,
        )
        thread.silent_logging = True  # type: ignore[attr-defined]
        self._stop_event = stop_event
        self._thread = thread
        thread.start()

    def stop(self) -> None:
        """Stop the current generation. Never blocks on the ticker thread."""
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._thread = None

    def _run(self, epoch: int, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self.callback(epoch)
            except Exception:
                logger.exception(f"Progress tick failed (epoch={epoch})")


TickerFactory = Callable[[TickCallback, float], ProgressTicker]
