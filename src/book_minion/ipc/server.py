"""IPC server for receiving commands from external processes."""

import json
import os
import socket
import threading
from pathlib import Path
from typing import Callable, Optional, Tuple

from loguru import logger

from book_minion import notifications, router
from book_minion.context import AppContext
from book_minion.domain.playback import PlaybackError

# Commands a remote client (hotkey, media key, another terminal) may send
REMOTE_COMMANDS = frozenset({
    'play', 'pause', 'toggle', 'stop', 'rewind', 'forward',
    'next', 'skip', 'prev', 'previous', 'seek', 'goto', 'sleep', 'status',
})

CommandHandler = Callable[[str, list], Tuple[bool, str]]


def get_socket_path() -> Path:
    """
    Get the path to the Book Minion control socket.

    Returns:
        Path to Unix socket
    """
    # Use XDG_RUNTIME_DIR if available, otherwise fall back to ~/.local/share
    runtime_dir = os.environ.get('XDG_RUNTIME_DIR')
    if runtime_dir:
        socket_dir = Path(runtime_dir) / 'book-minion'
    else:
        socket_dir = Path.home() / '.local' / 'share' / 'book-minion'

    socket_dir.mkdir(parents=True, exist_ok=True)
    return socket_dir / 'control.sock'


class IPCServer:
    """Unix socket server for IPC commands.

    Runs in a background thread and hands each command to ``handler``
    on that thread. The playback controller serializes access itself, so no
    hand-off to the main thread is needed.
    """

    def __init__(self, handler: CommandHandler, socket_path: Optional[Path] = None):
        """
        Initialize IPC server.

        Args:
            handler: Called with (command, args), returns (success, message)
            socket_path: Socket to listen on (default: get_socket_path())
        """
        self.handler = handler
        self.socket_path = socket_path or get_socket_path()
        self.server_socket: Optional[socket.socket] = None
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the IPC server in a background thread."""
        if self.running:
            return

        # Remove stale socket if it exists
        if self.socket_path.exists():
            try:
                self.socket_path.unlink()
            except OSError:
                logger.warning(f"Could not remove stale socket: {self.socket_path}")

        # Bind before returning so clients can connect as soon as the socket exists
        try:
            server_socket = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            server_socket.bind(str(self.socket_path))
            server_socket.listen(5)
            server_socket.settimeout(1.0)  # Poll every second
        except OSError:
            logger.exception(f"Could not listen on {self.socket_path}")
            return

        self.server_socket = server_socket
        self.running = True
        self.thread = threading.Thread(target=self._run_server, name="ipc-server", daemon=True)
        self.thread.start()
        logger.info(f"IPC server listening on {self.socket_path}")

    def stop(self) -> None:
        """Stop the IPC server and cleanup."""
        self.running = False

        # Close server socket to unblock accept()
        if self.server_socket:
            try:
                self.server_socket.close()
            except OSError:
                pass

        if self.thread and self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout=2.0)

        if self.socket_path.exists():
            try:
                self.socket_path.unlink()
            except OSError:
                pass

    def _run_server(self) -> None:
        """Run the Unix socket server loop."""
        try:
            while self.running:
                try:
                    client_socket, _ = self.server_socket.accept()
                    # Sequential processing keeps remote commands in order
                    self._handle_client(client_socket)
                except socket.timeout:
                    continue
                except OSError as e:
                    if self.running:  # Only log if we're still supposed to be running
                        logger.error(f"Error accepting connection: {e}")

        except OSError:
            logger.exception("IPC server error")
        finally:
            if self.server_socket:
                self.server_socket.close()

    def _handle_client(self, client_socket: socket.socket) -> None:
        """
        Handle a client connection: one JSON line in, one JSON line out.

        Args:
            client_socket: Connected client socket
        """
        with client_socket:
            try:
                client_socket.settimeout(5.0)
                data = b''
                while True:
                    chunk = client_socket.recv(4096)
                    if not chunk:
                        break
                    data += chunk
                    if b'\n' in data:
                        break

                if not data:
                    return

                payload = json.loads(data.decode('utf-8').strip())
                command = str(payload.get('command', ''))
                args = [str(arg) for arg in payload.get('args', [])]
                success, message = self.handler(command, args)
                response = {'success': success, 'message': message}

            except (json.JSONDecodeError, UnicodeDecodeError, AttributeError) as e:
                response = {'success': False, 'message': f'Invalid JSON: {e}'}
            except OSError as e:
                logger.warning(f"IPC client connection failed: {e}")
                return

            try:
                client_socket.sendall((json.dumps(response) + '\n').encode('utf-8'))
            except OSError as e:
                logger.warning(f"Could not send IPC response: {e}")


def process_ipc_command(ctx: AppContext, command: str, args: list) -> Tuple[bool, str]:
    """
    Process an IPC command through the router.

    Args:
        ctx: Application context
        command: Command name
        args: Command arguments

    Returns:
        (success, message) tuple
    """
    args_str = ' '.join(args) if args else ''
    logger.info(f"[IPC] {command} {args_str}".strip())

    if command not in REMOTE_COMMANDS:
        return False, f"Unknown remote command: '{command}'"

    try:
        router.handle_command(ctx, command, args)
    except (PlaybackError, ValueError) as e:
        error_message = f"Error: {e}"
        logger.error(f"[IPC] {command} failed: {e}")
        if ctx.config.notifications.enabled and ctx.config.notifications.show_errors:
            notifications.notify_error(error_message)
        return False, error_message

    return True, f"Executed: {command} {args_str}".strip()
