"""
Queue command handlers for Book Minion CLI.

Handles: queue, goto, move, remove, add

Positions typed by the user are 1-based; the controller works with 0-based
queue positions and track indices.
"""

from typing import List, Tuple

from book_minion.context import AppContext
from book_minion.core.output import log
from book_minion.utils.parsers import parse_position


def handle_queue_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Show the play queue with the current entry marked."""
    controller = ctx.controller
    book = controller.current_book
    if book is None:
        log("No book open")
        return ctx, True

    cursor = controller.queue_cursor
    lines = [f"📚 Queue for {book.name}:"]
    for position, track_index in enumerate(controller.queue):
        marker = "▶" if position == cursor else " "
        lines.append(f" {marker} {position + 1:3d}. {book.tracks[track_index].name}")

    console = ctx.console
    if console is not None:
        console.print("\n".join(lines))
    else:
        for line in lines:
            log(line)
    return ctx, True


def handle_goto_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle goto command: goto <queue position>."""
    controller = ctx.controller
    if controller.current_book is None:
        log("No book open", level="warning")
        return ctx, True
    if len(args) != 1:
        log("Usage: goto <position>", level="warning")
        return ctx, True

    try:
        position = parse_position(args[0], len(controller.queue))
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return ctx, True

    controller.move_to_queue_position(position)
    return ctx, True


def handle_move_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle move command: move <from> <to>."""
    controller = ctx.controller
    if controller.current_book is None:
        log("No book open", level="warning")
        return ctx, True
    if len(args) != 2:
        log("Usage: move <from> <to>", level="warning")
        return ctx, True

    count = len(controller.queue)
    try:
        from_position = parse_position(args[0], count)
        to_position = parse_position(args[1], count)
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return ctx, True

    controller.reorder(from_position, to_position)
    log(f"✅ Moved entry {from_position + 1} to {to_position + 1}")
    return ctx, True


def handle_remove_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle remove command: remove <position>."""
    controller = ctx.controller
    if controller.current_book is None:
        log("No book open", level="warning")
        return ctx, True
    if len(args) != 1:
        log("Usage: remove <position>", level="warning")
        return ctx, True

    count = len(controller.queue)
    if count <= 1:
        log("❌ Cannot remove the only entry of the queue", level="error")
        return ctx, True

    try:
        position = parse_position(args[0], count)
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return ctx, True

    controller.remove(position)
    log(f"✅ Removed entry {position + 1}")
    return ctx, True


def handle_add_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle add command: add <file number> [position].

    Without a position the file is appended to the end of the queue.
    """
    controller = ctx.controller
    book = controller.current_book
    if book is None:
        log("No book open", level="warning")
        return ctx, True
    if not 1 <= len(args) <= 2:
        log("Usage: add <file number> [position]", level="warning")
        return ctx, True

    try:
        track_index = parse_position(args[0], book.track_count)
        # One past the end is allowed and appends
        position = parse_position(args[1], len(controller.queue) + 1) if len(args) == 2 else -1
    except ValueError as e:
        log(f"❌ {e}", level="error")
        return ctx, True

    controller.add(track_index, position)
    log(f"✅ Added {book.tracks[track_index].name} to the queue")
    return ctx, True
