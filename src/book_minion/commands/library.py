"""
Library command handlers for Book Minion CLI.

Handles: progress, forget, rename
"""

from typing import List, Tuple

from book_minion.context import AppContext
from book_minion.core.output import log
from book_minion.domain.library import format_time


def handle_progress_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """List every book with saved progress, most recent first."""
    snapshots = ctx.store.load_all()
    if not snapshots:
        log("No saved progress")
        return ctx, True

    log(f"📚 Saved progress ({len(snapshots)} books):")
    for identity, snapshot in snapshots.items():
        name = ctx.names.get(identity) or identity
        position = (snapshot.queue_cursor if snapshot.queue_cursor is not None
                    else snapshot.current_track_index)
        log(f"   {name}: file {position + 1}, {format_time(snapshot.position_ms)}")
        if name != identity:
            log(f"      {identity}")
    return ctx, True


def handle_forget_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Forget saved progress: forget [<book folder>] (default: the open book)."""
    if args:
        identity = " ".join(args)
    else:
        book = ctx.controller.current_book
        if book is None:
            log("Usage: forget <book folder> (or open a book first)", level="warning")
            return ctx, True
        identity = book.identity

    ctx.store.clear(identity)
    log(f"🗑️  Forgot saved progress for {identity}")
    return ctx, True


def handle_rename_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Rename the open book: rename <name> (no name restores the folder name)."""
    book = ctx.controller.current_book
    if book is None:
        log("No book open", level="warning")
        return ctx, True

    if args:
        name = " ".join(args)
        ctx.names.save(book.identity, name)
        log(f"✅ Renamed to '{name}'")
    else:
        ctx.names.clear(book.identity)
        log("✅ Restored the folder name")
    return ctx, True
