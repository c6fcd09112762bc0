"""
Sleep timer - pauses playback after a number of minutes.
"""

import threading
import time
from typing import Callable, Optional

from loguru import logger

MAX_MINUTES = 480


class SleepTimer:
    """One-shot countdown calling on_expire when it runs out.

    Starting a new countdown replaces the running one.
    """

    def __init__(self, on_expire: Callable[[], None], max_minutes: int = MAX_MINUTES) -> None:
        self.on_expire = on_expire
        self.max_minutes = max_minutes
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._deadline: Optional[float] = None
        # Bumped on every start; an expiry from an older countdown is ignored
        self._generation = 0

    @property
    def active(self) -> bool:
        with self._lock:
            return self._timer is not None

    def start(self, minutes: int) -> None:
        """Start (or restart) the countdown.

        Raises:
            ValueError: If minutes is outside 1..max_minutes
        """
        if not 1 <= minutes <= self.max_minutes:
            raise ValueError(f"Sleep timer must be between 1 and {self.max_minutes} minutes")

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = threading.Timer(minutes * 60, self._expire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            self._deadline = time.monotonic() + minutes * 60
            timer.start()

        logger.info(f"Sleep timer set for {minutes} minutes")

    def cancel(self) -> bool:
        """Cancel the countdown. Returns True if one was running."""
        with self._lock:
            timer, self._timer = self._timer, None
            self._deadline = None
        if timer is None:
            return False
        timer.cancel()
        logger.info("Sleep timer cancelled")
        return True

    def remaining_seconds(self) -> int:
        """Seconds left, or 0 if no countdown is running."""
        with self._lock:
            if self._deadline is None:
                return 0
            return max(0, int(self._deadline - time.monotonic()))

    def _expire(self, generation: int) -> None:
        with self._lock:
            if self._timer is None or generation != self._generation:
                return
            self._timer = None
            self._deadline = None

        logger.info("Sleep timer expired, pausing playback")
        try:
            self.on_expire()
        except Exception:
            logger.exception("Sleep timer action failed")
