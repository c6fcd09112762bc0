"""
Command routing for Book Minion CLI.

Routes user commands to appropriate handler functions.
"""

from typing import List, Tuple

from book_minion.context import AppContext

# Import command handlers
from book_minion.commands import library
from book_minion.commands import playback
from book_minion.commands import queue


def print_help() -> None:
    """Display help information for available commands."""
    help_text = """
Book Minion CLI - Audiobook Player

Playback:
  open <file>... [--fresh]  Open a book made of these files (in this order)
  play              Start or resume playback
  pause             Pause playback (progress is saved)
  toggle            Play/pause
  stop              Save progress and close the book
  rewind            Jump back 10 seconds
  forward           Jump ahead 10 seconds
  next              Next file in the queue
  prev              Previous file (restarts the file at the first one)
  seek <time>       Seek to [h:]m:ss, or +/- seconds for relative
  status            Show the book, file and position
  sleep [minutes]   Pause after a while (sleep off to cancel)

Queue:
  queue             Show the play queue
  goto <n>          Jump to queue entry n
  move <from> <to>  Move a queue entry
  remove <n>        Remove queue entry n
  add <file> [n]    Add file number <file> to the queue (at entry n)

Books:
  progress          List saved progress for all books
  forget [folder]   Forget saved progress (default: the open book)
  rename [name]     Rename the open book (no name restores the folder name)

  help              Show this help message
  quit, exit        Save progress and exit

Remote control:
  While a session is running, 'book-minion <command>' from another
  terminal (or a hotkey) sends the command to it, e.g. 'book-minion toggle'.
"""
    print(help_text.strip())


def handle_command(ctx: AppContext, command: str, args: List[str]) -> Tuple[AppContext, bool]:
    """
    Handle a single command with explicit state passing.

    Args:
        ctx: Application context
        command: Command name
        args: Command arguments

    Returns:
        (updated_context, should_continue) - Updated context and whether to continue
    """
    if command in ['quit', 'exit']:
        print("Saving progress...")
        ctx.shutdown()
        print("Goodbye!")
        return ctx, False

    elif command == 'help':
        print_help()
        return ctx, True

    elif command == 'open':
        return playback.handle_open_command(ctx, args)

    elif command == 'play':
        return playback.handle_play_command(ctx)

    elif command == 'pause':
        return playback.handle_pause_command(ctx)

    elif command == 'toggle':
        return playback.handle_toggle_command(ctx)

    elif command == 'stop':
        return playback.handle_stop_command(ctx)

    elif command == 'rewind':
        return playback.handle_rewind_command(ctx)

    elif command == 'forward':
        return playback.handle_forward_command(ctx)

    elif command in ['next', 'skip']:
        return playback.handle_next_command(ctx)

    elif command in ['prev', 'previous']:
        return playback.handle_prev_command(ctx)

    elif command == 'seek':
        return playback.handle_seek_command(ctx, args)

    elif command == 'status':
        return playback.handle_status_command(ctx)

    elif command == 'sleep':
        return playback.handle_sleep_command(ctx, args)

    elif command == 'queue':
        return queue.handle_queue_command(ctx)

    elif command == 'goto':
        return queue.handle_goto_command(ctx, args)

    elif command == 'move':
        return queue.handle_move_command(ctx, args)

    elif command == 'remove':
        return queue.handle_remove_command(ctx, args)

    elif command == 'add':
        return queue.handle_add_command(ctx, args)

    elif command == 'progress':
        return library.handle_progress_command(ctx)

    elif command == 'forget':
        return library.handle_forget_command(ctx, args)

    elif command == 'rename':
        return library.handle_rename_command(ctx, args)

    elif command == '':
        return ctx, True

    else:
        print(f"Unknown command: '{command}'. Type 'help' for available commands.")
        return ctx, True
