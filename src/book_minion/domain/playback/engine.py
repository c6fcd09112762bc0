"""
Audio engine adapters.

The controller drives one engine handle per loaded track through the
EngineAdapter protocol. MpvEngine implements it on top of an mpv process
controlled over JSON IPC.
"""

import json
import os
import socket
import subprocess
import tempfile
import threading
import time
from itertools import count
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from loguru import logger

from .errors import EngineLoadError, EngineRuntimeError

CompletedCallback = Callable[[], None]
ErrorCallback = Callable[[str], None]

# Seconds to wait for mpv to create its IPC socket
SOCKET_TIMEOUT = 5.0

_handle_ids = count(1)


class EngineAdapter(Protocol):
    """One decode/playback handle for a single track.

    Completion and error callbacks may fire on any thread.
    """

    def load(self, source: str) -> int:
        """Open a source and return its duration in ms.

        Raises:
            EngineLoadError: If the source can't be opened or decoded
        """
        ...

    def play(self) -> None: ...
    def pause(self) -> None: ...
    def seek_to(self, position_ms: int) -> None: ...

    def position_ms(self) -> int:
        """Current position in ms.

        Raises:
            EngineRuntimeError: If the position can't be read right now
        """
        ...

    def duration_ms(self) -> int: ...
    def is_playing(self) -> bool: ...
    def release(self) -> None: ...
    def set_completed_callback(self, callback: Optional[CompletedCallback]) -> None: ...
    def set_error_callback(self, callback: Optional[ErrorCallback]) -> None: ...


EngineFactory = Callable[[], EngineAdapter]


def check_mpv_available(mpv_binary: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            [mpv_binary, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> bool:
    """Send JSON IPC command to MPV."""
    return _mpv_request(socket_path, command) is not None


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    response = _mpv_request(
        socket_path, {"command": ["get_property", property_name]}
    )
    if response is None:
        return None
    return response.get("data")


def _mpv_request(
    socket_path: Optional[str], command: dict[str, Any]
) -> Optional[dict[str, Any]]:
    """Send one IPC request; return the successful response or None."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(2.0)
            sock.connect(socket_path)
            sock.sendall((json.dumps(command) + "\n").encode("utf-8"))
            response = sock.recv(4096).decode("utf-8").strip()
    except (socket.error, OSError):
        return None

    # mpv may interleave event lines; the reply is the line with "error"
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if "error" in data:
            return data if data.get("error") == "success" else None
    return None


class MpvEngine:
    """EngineAdapter backed by a dedicated mpv process.

    Each handle starts its own idle, paused mpv; release() kills it. A
    watcher thread polls for end-of-file and process death and fires the
    completion/error callbacks.
    """

    def __init__(
        self,
        mpv_binary: str = "mpv",
        volume: int = 80,
        load_timeout: float = 2.0,
        poll_interval: float = 0.25,
    ) -> None:
        self.mpv_binary = mpv_binary
        self.volume = volume
        self.load_timeout = load_timeout
        self.poll_interval = poll_interval
        self.handle_id = next(_handle_ids)

        self._process: Optional[subprocess.Popen] = None
        self._socket_path: Optional[str] = None
        self._duration_ms = 0
        self._on_completed: Optional[CompletedCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._stop_watching = threading.Event()
        self._watcher: Optional[threading.Thread] = None
        self._completion_reported = False

    def load(self, source: str) -> int:
        self._start_process()

        if not send_mpv_command(
            self._socket_path, {"command": ["loadfile", source, "replace"]}
        ):
            self.release()
            raise EngineLoadError(f"mpv rejected source: {source}")

        duration = self._wait_for_duration()
        if duration is None:
            self.release()
            raise EngineLoadError(f"mpv could not decode: {source}")

        self._duration_ms = int(duration * 1000)
        self._start_watcher()
        return self._duration_ms

    def _start_process(self) -> None:
        """Start mpv with JSON IPC, paused and idle."""
        socket_path = str(
            Path(tempfile.gettempdir())
            / f"book-minion-mpv-{os.getpid()}-{self.handle_id}"
        )
        if os.path.exists(socket_path):
            logger.debug(f"Removing existing socket: {socket_path}")
            os.unlink(socket_path)

        cmd = [
            self.mpv_binary,
            "--idle=yes",
            "--pause",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={socket_path}",
            f"--volume={self.volume}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise EngineLoadError(f"Failed to start mpv: {e}") from e

        self._process = process
        self._socket_path = socket_path

        start_time = time.time()
        while not os.path.exists(socket_path):
            if time.time() - start_time > SOCKET_TIMEOUT or process.poll() is not None:
                self.release()
                raise EngineLoadError(
                    f"mpv socket creation timeout after {SOCKET_TIMEOUT}s"
                )
            time.sleep(0.05)

        logger.debug(f"mpv handle {self.handle_id} started with socket: {socket_path}")

    def _wait_for_duration(self) -> Optional[float]:
        """Poll until mpv reports a stable duration, or give up."""
        poll_interval = 0.05
        elapsed = 0.0
        last_duration = None
        stable_reads = 0

        while elapsed < self.load_timeout:
            duration = get_mpv_property(self._socket_path, "duration")

            if duration and duration > 0:
                if last_duration is not None and abs(duration - last_duration) < 0.1:
                    stable_reads += 1
                    if stable_reads >= 2:
                        return duration
                else:
                    stable_reads = 0
                last_duration = duration

            time.sleep(poll_interval)
            elapsed += poll_interval

        if last_duration:
            logger.warning(
                f"Duration not stable after {self.load_timeout}s, using {last_duration:.2f}s"
            )
        return last_duration

    def _start_watcher(self) -> None:
        self._stop_watching.clear()
        self._watcher = threading.Thread(
            target=self._watch, name=f"mpv-watcher-{self.handle_id}", daemon=True
        )
        self._watcher.silent_logging = True  # type: ignore[attr-defined]
        self._watcher.start()

    def _watch(self) -> None:
        """Report end-of-file and unexpected exits."""
        while not self._stop_watching.wait(self.poll_interval):
            process = self._process
            if process is None:
                return

            if process.poll() is not None:
                self._stop_watching.set()
                callback = self._on_error
                if callback:
                    callback(f"mpv exited unexpectedly (code {process.returncode})")
                return

            if self._completion_reported:
                continue

            if get_mpv_property(self._socket_path, "eof-reached") is True:
                self._completion_reported = True
                callback = self._on_completed
                if callback:
                    callback()

    def play(self) -> None:
        send_mpv_command(self._socket_path, {"command": ["set_property", "pause", False]})

    def pause(self) -> None:
        send_mpv_command(self._socket_path, {"command": ["set_property", "pause", True]})

    def seek_to(self, position_ms: int) -> None:
        self._completion_reported = False
        send_mpv_command(
            self._socket_path,
            {"command": ["seek", max(0, position_ms) / 1000, "absolute"]},
        )

    def position_ms(self) -> int:
        position = get_mpv_property(self._socket_path, "time-pos")
        # None during seeks and on a missed reply; not the same as 0:00
        if position is None:
            raise EngineRuntimeError("mpv did not report time-pos")
        return int(position * 1000)

    def duration_ms(self) -> int:
        return self._duration_ms

    def is_playing(self) -> bool:
        if self._process is None or self._process.poll() is not None:
            return False
        paused = get_mpv_property(self._socket_path, "pause")
        eof = get_mpv_property(self._socket_path, "eof-reached")
        return paused is False and eof is not True

    def set_completed_callback(self, callback: Optional[CompletedCallback]) -> None:
        self._on_completed = callback

    def set_error_callback(self, callback: Optional[ErrorCallback]) -> None:
        self._on_error = callback

    def release(self) -> None:
        """Stop mpv and clean up. Safe to call more than once, from any thread."""
        self._stop_watching.set()
        self._on_completed = None
        self._on_error = None

        process, self._process = self._process, None
        if process:
            try:
                process.kill()
                process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired):
                pass  # Process already terminated or couldn't be killed

        socket_path, self._socket_path = self._socket_path, None
        if socket_path and os.path.exists(socket_path):
            try:
                os.unlink(socket_path)
            except OSError:
                pass


def mpv_engine_factory(
    mpv_binary: str = "mpv", volume: int = 80, load_timeout: float = 2.0
) -> EngineFactory:
    """Build an EngineFactory producing MpvEngine handles with fixed settings."""

    def factory() -> EngineAdapter:
        return MpvEngine(mpv_binary=mpv_binary, volume=volume, load_timeout=load_timeout)

    return factory
