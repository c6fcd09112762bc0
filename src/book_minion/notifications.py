"""Desktop notification helpers for Book Minion."""

import shutil
import subprocess
from typing import Literal

from loguru import logger

from book_minion.core.config import NotificationsConfig
from book_minion.domain.library.models import Book
from book_minion.domain.library.names import BookNameStore

APP_NAME = "Book Minion"

# Stable id so each update replaces the previous session notification
SESSION_NOTIFICATION_ID = "7313"


def notify(
    title: str,
    message: str,
    urgency: Literal["low", "normal", "critical"] = "normal",
    replace_id: str | None = None,
) -> None:
    """
    Show a desktop notification using notify-send.

    Args:
        title: Notification title
        message: Notification message body
        urgency: Urgency level ('low', 'normal', 'critical')
        replace_id: Replace the notification with this id instead of stacking

    Note:
        Silently skips notification if notify-send is not available.
        Errors are logged but don't interrupt program flow.
    """
    if not shutil.which("notify-send"):
        return

    cmd = ["notify-send", "--urgency", urgency, "--app-name", APP_NAME]
    if replace_id:
        cmd += ["--replace-id", replace_id]
    cmd += [title, message]

    try:
        subprocess.run(
            cmd,
            check=False,
            timeout=2.0,
            capture_output=True,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug(f"notify-send failed: {e}")


def notify_error(message: str) -> None:
    """Show an error notification with X mark."""
    notify(f"✗ {APP_NAME}", message, urgency="critical")


class DesktopPresenter:
    """Shows the session as a desktop notification.

    Every update replaces the same notification, so there is at most one on
    screen per session.
    """

    def __init__(
        self, config: NotificationsConfig, names: BookNameStore | None = None
    ) -> None:
        self.config = config
        self.names = names
        self.visible = False

    def present(self, book: Book, track_index: int, is_playing: bool) -> None:
        if not self.config.enabled:
            return

        title = book.name
        if self.names is not None:
            title = self.names.display_name(book.identity, book.name)

        track = book.tracks[track_index]
        status = "▶ Playing" if is_playing else "⏸ Paused"
        body = f"{status}: {track.name} ({track_index + 1}/{book.track_count})"

        notify(title, body, urgency="low", replace_id=SESSION_NOTIFICATION_ID)
        self.visible = True

    def dismiss(self) -> None:
        if not self.visible:
            return
        self.visible = False
        if self.config.enabled:
            notify(APP_NAME, "Stopped", urgency="low", replace_id=SESSION_NOTIFICATION_ID)

    def error(self, message: str) -> None:
        if self.config.enabled and self.config.show_errors:
            notify_error(message)
