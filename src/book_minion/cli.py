"""
Book Minion CLI - Entry point with IPC support

This module serves as the CLI entry point, supporting interactive listening
sessions, saved-progress utilities and IPC commands for hotkey integration.
"""

import argparse
import sys

from book_minion import ipc

# Subcommands forwarded to a running session as-is
TRANSPORT_COMMANDS = {
    'play': 'Start or resume playback',
    'pause': 'Pause playback (saves progress)',
    'toggle': 'Play/pause',
    'stop': 'Save progress and close the book',
    'rewind': 'Jump back 10 seconds',
    'forward': 'Jump ahead 10 seconds',
    'next': 'Next file in the queue',
    'prev': 'Previous file',
    'status': 'Show the current position in the session terminal',
}


def run_progress() -> int:
    """Print saved progress for every book.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from book_minion.core import database
    from book_minion.domain.library import BookNameStore, format_time
    from book_minion.domain.playback import SqliteSessionStore

    try:
        database.init_database()
        snapshots = SqliteSessionStore().load_all()
        names = BookNameStore()

        if not snapshots:
            print("No saved progress")
            return 0

        for identity, snapshot in snapshots.items():
            cursor = (snapshot.queue_cursor if snapshot.queue_cursor is not None
                      else snapshot.current_track_index)
            name = names.display_name(identity, identity)
            print(f"{name}: file {cursor + 1}, {format_time(snapshot.position_ms)}")
            if name != identity:
                print(f"  {identity}")
        return 0

    except Exception as e:
        print(f"Error reading saved progress: {e}", file=sys.stderr)
        return 1


def run_forget(identity: str) -> int:
    """Forget saved progress for one book folder.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from book_minion.core import database
    from book_minion.domain.playback import SqliteSessionStore

    try:
        database.init_database()
        SqliteSessionStore().clear(identity)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Forgot saved progress for {identity}")
    return 0


def send_ipc_command(command: str, args: list) -> int:
    """
    Send a command to the running Book Minion session via IPC.

    Args:
        command: Command name
        args: Command arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    success, message = ipc.send_command(command, args)

    if success:
        print(message)
        return 0
    else:
        print(message, file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='book-minion',
        description="Book Minion - Audiobook Player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest='subcommand', help='Available commands')

    listen_parser = subparsers.add_parser(
        'listen', help='Open a book made of these files and start a session'
    )
    listen_parser.add_argument('files', nargs='+', help='Audio files, in playback order')
    listen_parser.add_argument(
        '--fresh', action='store_true', help='Start from the beginning, ignoring saved progress'
    )
    listen_parser.add_argument('--name', help='Display name for the book')

    # Utility commands (run directly, not via IPC)
    subparsers.add_parser('progress', help='List saved progress for all books')
    forget_parser = subparsers.add_parser('forget', help='Forget saved progress for a book')
    forget_parser.add_argument('folder', help='Book folder (as listed by progress)')

    # IPC commands for a running session
    for name, help_text in TRANSPORT_COMMANDS.items():
        subparsers.add_parser(name, help=help_text)

    seek_parser = subparsers.add_parser('seek', help='Seek within the current file')
    seek_parser.add_argument('time', help='[h:]m:ss, or +/-seconds for relative')

    goto_parser = subparsers.add_parser('goto', help='Jump to a queue entry')
    goto_parser.add_argument('position', help='Queue entry (1-based)')

    sleep_parser = subparsers.add_parser('sleep', help='Pause after a number of minutes')
    sleep_parser.add_argument('minutes', nargs='?', help="Minutes, or 'off' to cancel")

    return parser


def main() -> None:
    """Main entry point for the book-minion command."""
    parser = build_parser()
    # Relative seeks like "-30" must not be taken for options
    argv = sys.argv[1:]
    if len(argv) == 2 and argv[0] == 'seek':
        argv = ['seek', '--', argv[1]]
    args = parser.parse_args(argv)

    if args.subcommand in TRANSPORT_COMMANDS:
        sys.exit(send_ipc_command(args.subcommand, []))

    elif args.subcommand == 'seek':
        sys.exit(send_ipc_command('seek', [args.time]))

    elif args.subcommand == 'goto':
        sys.exit(send_ipc_command('goto', [args.position]))

    elif args.subcommand == 'sleep':
        sys.exit(send_ipc_command('sleep', [args.minutes] if args.minutes else []))

    elif args.subcommand == 'progress':
        sys.exit(run_progress())

    elif args.subcommand == 'forget':
        sys.exit(run_forget(args.folder))

    # 'listen' or no subcommand - start interactive mode
    from .main import interactive_mode

    if args.subcommand == 'listen':
        interactive_mode(args.files, fresh=args.fresh, name=args.name)
    else:
        interactive_mode()


if __name__ == "__main__":
    main()
