"""Application context for explicit state passing.

This module provides the AppContext dataclass that bundles the services a
command handler needs. Handlers receive it explicitly and return it, so no
module reaches for global state.
"""

from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from book_minion.core.config import Config
from book_minion.domain.library.names import BookNameStore
from book_minion.domain.playback.controller import PlaybackSessionController
from book_minion.domain.playback.sleep_timer import SleepTimer
from book_minion.domain.playback.store import SessionStore


@dataclass
class AppContext:
    """Application context passed to all command handlers.

    Attributes:
        config: Application configuration
        controller: The playback session (owns its own state and lock)
        store: Snapshot store shared with the controller
        names: Custom book display names
        sleep_timer: Pauses the controller when it runs out
        console: Rich Console for formatted output
    """

    config: Config
    controller: PlaybackSessionController
    store: SessionStore
    names: BookNameStore
    sleep_timer: SleepTimer
    console: Optional[Console] = None

    @classmethod
    def create(
        cls,
        config: Config,
        controller: PlaybackSessionController,
        store: SessionStore,
        names: BookNameStore,
        console: Optional[Console] = None,
    ) -> "AppContext":
        """Create the application context.

        The sleep timer is wired to pause the given controller.
        """
        sleep_timer = SleepTimer(
            on_expire=controller.pause, max_minutes=config.sleep_timer.max_minutes
        )
        return cls(
            config=config,
            controller=controller,
            store=store,
            names=names,
            sleep_timer=sleep_timer,
            console=console,
        )

    def shutdown(self) -> None:
        """Cancel the sleep timer and close the session (saving progress)."""
        self.sleep_timer.cancel()
        self.controller.close()
