"""IPC (Inter-Process Communication) for Book Minion.

Enables hotkeys and other terminals to drive a running listening session.
"""

from .client import send_command
from .server import IPCServer, get_socket_path, process_ipc_command

__all__ = ['send_command', 'IPCServer', 'get_socket_path', 'process_ipc_command']
