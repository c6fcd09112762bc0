"""
Book Minion CLI - Main entry point and interactive loop
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger
from rich.console import Console

from book_minion import router
from book_minion.commands import playback as playback_commands
from book_minion.context import AppContext
from book_minion.core import config, database
from book_minion.core.output import get_console, safe_print, setup_loguru
from book_minion.domain.library import BookNameStore
from book_minion.domain.playback import (
    ERROR_MARKER,
    PlaybackError,
    PlaybackSessionController,
    SessionListener,
    SqliteSessionStore,
    check_mpv_available,
    mpv_engine_factory,
)
from book_minion.ipc import IPCServer, process_ipc_command
from book_minion.notifications import DesktopPresenter
from book_minion.utils import parse_command


class ConsoleListener(SessionListener):
    """Echoes session changes on the terminal.

    Notifications can arrive from engine and ticker threads, so this prints
    straight to the console instead of going through log().
    """

    def __init__(self, console: Console, presenter: Optional[DesktopPresenter] = None) -> None:
        self.console = console
        self.presenter = presenter

    def on_file_changed(self, track_index: int, name: str) -> None:
        if name.startswith(ERROR_MARKER):
            self.console.print(
                f"[red]✗ File {track_index + 1}: {name[len(ERROR_MARKER):]}[/red]"
            )
        else:
            self.console.print(f"[cyan]♪ File {track_index + 1}: {name}[/cyan]")

    def on_playback_state_changed(self, is_playing: bool) -> None:
        logger.debug(f"Playback state changed: playing={is_playing}")

    def on_error(self, message: str) -> None:
        self.console.print(f"[red]{message}[/red]")
        if self.presenter is not None:
            self.presenter.error(message)


def build_context(cfg: config.Config, console: Console) -> AppContext:
    """Wire the store, presenter and controller for one session."""
    player = cfg.player
    store = SqliteSessionStore()
    names = BookNameStore()
    presenter = DesktopPresenter(cfg.notifications, names)

    controller = PlaybackSessionController(
        engine_factory=mpv_engine_factory(
            mpv_binary=player.mpv_binary,
            volume=player.volume,
            load_timeout=player.load_timeout_seconds,
        ),
        store=store,
        presenter=presenter,
        skip_ms=player.skip_ms,
        tick_interval=player.tick_interval_seconds,
    )
    controller.subscribe(ConsoleListener(console, presenter))

    return AppContext.create(cfg, controller, store, names, console)


def _setup_logging(cfg: config.Config) -> None:
    log_file = (
        Path(cfg.logging.log_file)
        if cfg.logging.log_file
        else (config.get_data_dir() / "book-minion.log")
    )
    setup_loguru(log_file, level=cfg.logging.level, console_output=cfg.logging.console_output)


def interactive_mode(
    paths: Optional[Sequence[str]] = None, fresh: bool = False, name: Optional[str] = None
) -> None:
    """Run the interactive command loop, optionally opening a book first.

    Args:
        paths: Audio files of the book to open, in playback order
        fresh: Ignore saved progress for that book
        name: Display name to store for that book
    """
    config.ensure_directories()
    cfg = config.load_config()
    _setup_logging(cfg)
    database.init_database()

    if not check_mpv_available(cfg.player.mpv_binary):
        safe_print(
            f"❌ mpv not found ('{cfg.player.mpv_binary}'). Install mpv or set "
            "[player] mpv_binary in config.toml",
            style="red",
        )
        sys.exit(1)

    console = get_console()
    ctx = build_context(cfg, console)

    ipc_server = None
    if cfg.ipc.enabled:
        ipc_server = IPCServer(lambda command, args: process_ipc_command(ctx, command, args))
        ipc_server.start()

    console.print("[bold green]Welcome to Book Minion![/bold green]")
    console.print("Type 'help' for available commands, or 'quit' to exit.")
    console.print()

    try:
        if paths:
            ctx, _ = playback_commands.open_book(ctx, paths, fresh=fresh, name=name)

        should_continue = True
        while should_continue:
            try:
                user_input = input("book-minion> ").strip()
                command, args = parse_command(user_input)
                ctx, should_continue = router.handle_command(ctx, command, args)

            except PlaybackError as e:
                logger.warning(f"Command failed: {e}")
                console.print(f"[red]❌ {e}[/red]")
            except KeyboardInterrupt:
                console.print("\n[yellow]Use 'quit' or 'exit' to leave gracefully.[/yellow]")
            except EOFError:
                console.print("\n[green]Goodbye![/green]")
                break

    except Exception as e:
        logger.exception("Unexpected error in interactive loop")
        console.print(f"[red]An unexpected error occurred: {e}[/red]")
        sys.exit(1)
    finally:
        if ipc_server is not None:
            ipc_server.stop()
        # Idempotent: a no-op after 'quit'
        ctx.shutdown()
