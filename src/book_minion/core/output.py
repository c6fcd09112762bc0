"""
Unified output system using Loguru and Rich.

File logging goes through loguru; user-facing messages are echoed on a
shared Rich console.
"""

import sys
import threading
from pathlib import Path

from loguru import logger
from rich.console import Console

_console: Console | None = None
_console_lock = threading.Lock()


def setup_loguru(
    log_file: Path, level: str = "INFO", console_output: bool = False
) -> None:
    """
    Configure loguru for file logging.

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also emit log records on stderr (for debugging)
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def get_console() -> Console:
    """Get or create the global Rich Console instance."""
    global _console
    with _console_lock:
        if _console is None:
            _console = Console()
        return _console


def safe_print(message: str, style: str | None = None) -> None:
    """Print using the Rich Console with optional styling.

    Args:
        message: The message to print
        style: Optional Rich style string (e.g., "bold red", "green")
    """
    console = get_console()
    if style:
        console.print(message, style=style)
    else:
        console.print(message)


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints to the console.

    Use this instead of print() for user-facing messages that should also be logged.
    Background threads can set ``silent_logging = True`` on themselves to keep
    their messages out of the terminal.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    if getattr(threading.current_thread(), "silent_logging", False):
        return

    style_map = {
        "debug": "cyan",
        "info": None,
        "warning": "yellow",
        "error": "red",
    }
    safe_print(message, style=style_map.get(level))
