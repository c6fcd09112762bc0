"""IPC client for sending commands to a running Book Minion session."""

import json
import socket
from pathlib import Path
from typing import List, Optional, Tuple

from .server import get_socket_path


def send_command(
    command: str, args: Optional[List[str]] = None, socket_path: Optional[Path] = None
) -> Tuple[bool, str]:
    """
    Send a command to the running Book Minion instance.

    Args:
        command: Command name (e.g., 'toggle', 'rewind', 'sleep')
        args: Command arguments (optional)
        socket_path: Socket to connect to (default: get_socket_path())

    Returns:
        (success, message) tuple
            success: True if command executed successfully
            message: Response message or error description
    """
    socket_path = socket_path or get_socket_path()

    if not socket_path.exists():
        return False, "Book Minion is not running"

    payload = {
        'command': command,
        'args': args or []
    }

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(15.0)  # Opening a file can take a while
            sock.connect(str(socket_path))
            sock.sendall((json.dumps(payload) + '\n').encode('utf-8'))

            response_data = b''
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                response_data += chunk
                if b'\n' in response_data:
                    break

        if not response_data:
            return False, "No response from Book Minion"

        response = json.loads(response_data.decode('utf-8').strip())
        return response.get('success', False), response.get('message', 'No message')

    except socket.timeout:
        return False, "Book Minion not responding (timeout)"
    except (ConnectionRefusedError, FileNotFoundError):
        return False, "Book Minion not running"
    except json.JSONDecodeError as e:
        return False, f"Invalid response from Book Minion: {e}"
    except OSError as e:
        return False, f"Failed to send command: {e}"
