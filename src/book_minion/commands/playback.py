"""
Playback command handlers for Book Minion CLI.

Handles: open, play, pause, toggle, stop, rewind, forward, next, prev, seek,
status, sleep
"""

from typing import List, Optional, Sequence, Tuple

from book_minion.context import AppContext
from book_minion.core.output import log
from book_minion.domain import library
from book_minion.domain.playback import EmptyBookError, PlaybackStatus


def open_book(
    ctx: AppContext,
    paths: Sequence[str],
    fresh: bool = False,
    name: Optional[str] = None,
) -> Tuple[AppContext, bool]:
    """
    Open a book made of the given files, in the given order.

    Args:
        ctx: Application context
        paths: Audio files in playback order
        fresh: Start from the beginning instead of the saved position
        name: Display name to store for the book

    Returns:
        (updated_context, should_continue)
    """
    book = library.book_from_paths(paths)
    if not book.tracks:
        log("❌ No files given. Usage: open <file> [<file> ...] [--fresh]", level="error")
        return ctx, True

    if name:
        ctx.names.save(book.identity, name)
    display_name = ctx.names.display_name(book.identity, book.name)
    book = book._replace(name=display_name)

    resume = ctx.config.player.resume_on_load and not fresh
    try:
        ctx.controller.load_book(book, resume_from_snapshot=resume)
    except EmptyBookError as e:
        log(f"❌ {e}", level="error")
        return ctx, True

    controller = ctx.controller
    log(f"📖 {book.name} ({book.track_count} files)")
    if controller.status is PlaybackStatus.ERROR:
        log("⚠️  Current file could not be loaded; try 'next' or 'goto'", level="warning")
        return ctx, True

    log(
        f"   Position: file {controller.queue_cursor + 1}/{len(controller.queue)}, "
        f"{library.format_time(controller.current_position)}"
    )
    if ctx.config.player.autoplay_on_load:
        controller.play()
    return ctx, True


def handle_open_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle open command: open <file> [<file> ...] [--fresh]."""
    fresh = "--fresh" in args
    paths = [arg for arg in args if arg != "--fresh"]
    return open_book(ctx, paths, fresh=fresh)


def _require_book(ctx: AppContext) -> bool:
    if ctx.controller.current_book is None:
        log("No book open. Use 'open <file> ...' first.", level="warning")
        return False
    return True


def handle_play_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle play command."""
    if _require_book(ctx):
        ctx.controller.play()
        if ctx.controller.is_playing:
            log("▶️  Playing")
    return ctx, True


def handle_pause_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle pause command (saves progress)."""
    if _require_book(ctx):
        ctx.controller.pause()
        log(f"⏸️  Paused at {library.format_time(ctx.controller.current_position)}")
    return ctx, True


def handle_toggle_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    if ctx.controller.is_playing:
        return handle_pause_command(ctx)
    return handle_play_command(ctx)


def handle_stop_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle stop command: save progress and close the book."""
    if _require_book(ctx):
        ctx.sleep_timer.cancel()
        ctx.controller.stop()
        log("⏹️  Stopped (progress saved)")
    return ctx, True


def handle_rewind_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    if _require_book(ctx):
        ctx.controller.rewind()
        log(f"⏪ {library.format_time(ctx.controller.current_position)}")
    return ctx, True


def handle_forward_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    if _require_book(ctx):
        ctx.controller.forward()
        log(f"⏩ {library.format_time(ctx.controller.current_position)}")
    return ctx, True


def handle_next_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    if _require_book(ctx):
        controller = ctx.controller
        if controller.queue_cursor >= len(controller.queue) - 1:
            log("Already at the last file", level="warning")
        else:
            controller.next_track()
    return ctx, True


def handle_prev_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle prev command (restarts the file when already at the first one)."""
    if _require_book(ctx):
        ctx.controller.previous_track()
    return ctx, True


def handle_seek_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """
    Handle seek command.

    seek 1:23:45   Absolute position in the current file
    seek +30       Relative, in seconds (or m:ss)
    seek -1:00
    """
    if not _require_book(ctx):
        return ctx, True
    if not args:
        log("Usage: seek <[h:]m:ss | seconds> (prefix + or - for relative)", level="warning")
        return ctx, True

    value = args[0]
    try:
        if value[0] in "+-":
            offset = library.parse_time(value[1:])
            if value[0] == "-":
                offset = -offset
            target = ctx.controller.current_position + offset
        else:
            target = library.parse_time(value)
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return ctx, True

    ctx.controller.seek_to(target)
    log(f"⏩ {library.format_time(ctx.controller.current_position)}")
    return ctx, True


def handle_status_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle status command: show the book, file and position."""
    controller = ctx.controller
    book = controller.current_book
    if book is None:
        log("No book open")
        return ctx, True

    track_index = controller.current_track_index
    track = book.tracks[track_index]
    status = controller.status

    log(f"📖 {book.name}")
    log(f"   File {controller.queue_cursor + 1}/{len(controller.queue)}: {track.name}")
    if controller.has_track_loaded:
        log(
            f"   {library.format_time(controller.current_position)} / "
            f"{library.format_time(controller.duration)} ({status.value})"
        )
    else:
        log(f"   Not loaded ({status.value})", level="warning")

    total = book.total_duration_ms
    if total is not None:
        log(f"   Book length: {library.format_time(total)}")

    if ctx.sleep_timer.active:
        remaining = ctx.sleep_timer.remaining_seconds()
        log(f"   😴 Sleep in {library.format_time(remaining * 1000)}")
    return ctx, True


def handle_sleep_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """
    Handle sleep command.

    sleep            Show the timer (or start it with the default length)
    sleep <minutes>  Pause playback after <minutes>
    sleep off        Cancel the timer
    """
    timer = ctx.sleep_timer

    if args and args[0] in ("off", "cancel"):
        if timer.cancel():
            log("😴 Sleep timer cancelled")
        else:
            log("No sleep timer running")
        return ctx, True

    if not args and timer.active:
        log(f"😴 Sleep in {library.format_time(timer.remaining_seconds() * 1000)}")
        return ctx, True

    try:
        minutes = int(args[0]) if args else ctx.config.sleep_timer.default_minutes
        timer.start(minutes)
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return ctx, True

    log(f"😴 Pausing in {minutes} minutes")
    return ctx, True
