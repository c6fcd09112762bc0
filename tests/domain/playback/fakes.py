"""Test doubles for the playback session controller."""

from typing import Callable, Optional

from book_minion.domain.library.models import Book, Track
from book_minion.domain.playback.errors import EngineLoadError, EngineRuntimeError
from book_minion.domain.playback.notifier import SessionListener
from book_minion.domain.playback.snapshot import SessionSnapshot


def make_book(
    track_count: int = 3, identity: str = "/books/dune", unreadable: tuple[int, ...] = ()
) -> Book:
    """Book with tracks named 01.mp3, 02.mp3, ...; indices in unreadable can't be opened."""
    tracks = tuple(
        Track(
            source=f"{identity}/{i + 1:02d}.mp3",
            name=f"{i + 1:02d}.mp3",
            size=1000,
            readable=i not in unreadable,
        )
        for i in range(track_count)
    )
    return Book(name=identity.rsplit("/", 1)[-1], identity=identity, tracks=tracks)


class FakeEngine:
    """In-memory engine handle. Tests drive completion and errors by hand."""

    def __init__(self, duration_ms: int = 60000, fail_load: bool = False) -> None:
        self.duration = duration_ms
        self.fail_load = fail_load
        self.source: Optional[str] = None
        self.position = 0
        self.playing = False
        self.released = False
        self.seeks: list[int] = []
        self.on_completed: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None
        # Simulate a player that stops answering mid-session
        self.fail_position = False
        self.fail_seek = False

    def load(self, source: str) -> int:
        if self.fail_load:
            raise EngineLoadError(f"cannot decode {source}")
        self.source = source
        return self.duration

    def play(self) -> None:
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def seek_to(self, position_ms: int) -> None:
        if self.fail_seek:
            raise EngineRuntimeError("seek rejected")
        self.seeks.append(position_ms)
        self.position = position_ms

    def position_ms(self) -> int:
        if self.fail_position:
            raise EngineRuntimeError("position unavailable")
        return self.position

    def duration_ms(self) -> int:
        return self.duration

    def is_playing(self) -> bool:
        return self.playing

    def release(self) -> None:
        self.released = True
        self.playing = False

    def set_completed_callback(self, callback) -> None:
        self.on_completed = callback

    def set_error_callback(self, callback) -> None:
        self.on_error = callback

    # Test helpers

    def complete(self) -> None:
        self.position = self.duration
        self.playing = False
        if self.on_completed:
            self.on_completed()

    def fail(self, reason: str) -> None:
        if self.on_error:
            self.on_error(reason)


class FakeEngineFactory:
    """Creates one FakeEngine per load and remembers all of them."""

    def __init__(self, duration_ms: int = 60000) -> None:
        self.duration_ms = duration_ms
        self.failing_loads = 0
        self.engines: list[FakeEngine] = []

    def __call__(self) -> FakeEngine:
        fail = self.failing_loads > 0
        if fail:
            self.failing_loads -= 1
        engine = FakeEngine(self.duration_ms, fail_load=fail)
        self.engines.append(engine)
        return engine

    @property
    def current(self) -> FakeEngine:
        return self.engines[-1]


class FakeStore:
    """Dict-backed SessionStore that records every save."""

    def __init__(self, snapshots: Optional[dict[str, SessionSnapshot]] = None) -> None:
        self.snapshots = dict(snapshots or {})
        self.saves: list[SessionSnapshot] = []
        self.fail_saves = False

    def load(self, book_identity: str) -> Optional[SessionSnapshot]:
        return self.snapshots.get(book_identity)

    def save(self, snapshot: SessionSnapshot) -> None:
        if self.fail_saves:
            raise OSError("disk full")
        self.saves.append(snapshot)
        self.snapshots[snapshot.book_identity] = snapshot

    def load_all(self) -> dict[str, SessionSnapshot]:
        return dict(self.snapshots)

    def clear(self, book_identity: str) -> None:
        self.snapshots.pop(book_identity, None)


class RecordingListener(SessionListener):
    """Records every notification as a (kind, *args) tuple."""

    def __init__(self) -> None:
        self.events: list[tuple] = []

    def on_progress(self, position_ms: int, duration_ms: int) -> None:
        self.events.append(("progress", position_ms, duration_ms))

    def on_file_changed(self, track_index: int, name: str) -> None:
        self.events.append(("file_changed", track_index, name))

    def on_playback_state_changed(self, is_playing: bool) -> None:
        self.events.append(("playing", is_playing))

    def on_error(self, message: str) -> None:
        self.events.append(("error", message))

    def on_queue_changed(self, queue: list[int], cursor: int) -> None:
        self.events.append(("queue", queue, cursor))

    def of_kind(self, kind: str) -> list[tuple]:
        return [event for event in self.events if event[0] == kind]

    def clear(self) -> None:
        self.events.clear()


class ManualTicker:
    """ProgressTicker stand-in that only ticks when told to."""

    def __init__(self, callback: Callable[[int], None], interval: float = 1.0) -> None:
        self.callback = callback
        self.interval = interval
        self.generation: Optional[int] = None
        self.starts = 0

    @property
    def running(self) -> bool:
        return self.generation is not None

    def start(self, epoch: int) -> None:
        self.generation = epoch
        self.starts += 1

    def stop(self) -> None:
        self.generation = None

    def tick(self) -> None:
        if self.generation is not None:
            self.callback(self.generation)

    def tick_as(self, generation: int) -> None:
        """Deliver a tick that was scheduled for generation (possibly stale)."""
        self.callback(generation)


class FakePresenter:
    def __init__(self) -> None:
        self.presented: list[tuple[str, int, bool]] = []
        self.dismissed = 0

    def present(self, book: Book, track_index: int, is_playing: bool) -> None:
        self.presented.append((book.identity, track_index, is_playing))

    def dismiss(self) -> None:
        self.dismissed += 1
