"""
Playback session controller.

The single authority over one listening session: it holds the session
state, drives the engine through the play queue, reacts to engine events,
runs the progress ticker and persists snapshots.

All public operations and all asynchronous entry points (engine callbacks,
ticker wake-ups) take the controller lock, so state is only ever touched
from one logical context at a time. Engine callbacks and ticks carry the
epoch they were created in and are dropped once that epoch is over.
"""

import threading
from typing import Optional, Protocol

from loguru import logger

from book_minion.domain.library.models import Book

from .engine import EngineAdapter, EngineFactory
from .errors import (
    EmptyBookError,
    EngineLoadError,
    EngineRuntimeError,
    InvalidIndexError,
    TrackUnavailableError,
)
from .notifier import ChangeNotifier, SessionListener
from .play_queue import identity_queue, insert_entry, move_entry, remove_entry
from .snapshot import SessionSnapshot, restore_position
from .state import PlaybackStatus, SessionState
from .store import SessionStore
from .ticker import ProgressTicker, TickerFactory

# Default rewind/forward step
SKIP_MS = 10000


class SessionPresenter(Protocol):
    """Whatever shows the session outside the app (notification, tray, ...).

    present() is called whenever a track is loaded, whether or not it is
    playing, because a loaded session is always presentable.
    """

    def present(self, book: Book, track_index: int, is_playing: bool) -> None: ...
    def dismiss(self) -> None: ...


class PlaybackSessionController:
    """Owns one playback session and its engine handle."""

    def __init__(
        self,
        engine_factory: EngineFactory,
        store: SessionStore,
        presenter: Optional[SessionPresenter] = None,
        skip_ms: int = SKIP_MS,
        tick_interval: float = 1.0,
        ticker_factory: TickerFactory = ProgressTicker,
    ) -> None:
        self._engine_factory = engine_factory
        self._store = store
        self._presenter = presenter
        self.skip_ms = skip_ms

        self._lock = threading.RLock()
        self._state = SessionState()
        self._engine: Optional[EngineAdapter] = None
        self._duration_ms = 0
        self._notifier = ChangeNotifier()

        # Bumped whenever the engine handle is released
        self._epoch = 0
        # Bumped whenever the ticker is started or stopped
        self._tick_generation = 0
        self._tick_epoch = 0
        self._ticker = ticker_factory(self._handle_tick, tick_interval)
        self._closed = False

    # ------------------------------------------------------------------
    # Subscription

    def subscribe(self, listener: SessionListener) -> None:
        self._notifier.subscribe(listener)

    def unsubscribe(self, listener: Optional[SessionListener] = None) -> None:
        self._notifier.unsubscribe(listener)

    # ------------------------------------------------------------------
    # Read accessors

    @property
    def current_position(self) -> int:
        with self._lock:
            return self._sample_position()

    @property
    def duration(self) -> int:
        with self._lock:
            return self._duration_ms if self._engine is not None else 0

    @property
    def current_track_index(self) -> int:
        with self._lock:
            return self._state.current_track_index

    @property
    def current_book(self) -> Optional[Book]:
        with self._lock:
            return self._state.book

    @property
    def queue(self) -> list[int]:
        with self._lock:
            return list(self._state.queue)

    @property
    def queue_cursor(self) -> int:
        with self._lock:
            return self._state.queue_cursor

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return self._state.is_playing

    @property
    def status(self) -> PlaybackStatus:
        with self._lock:
            return self._state.status

    @property
    def has_track_loaded(self) -> bool:
        with self._lock:
            return self._engine is not None

    # ------------------------------------------------------------------
    # Book loading

    def load_book(self, book: Book, resume_from_snapshot: bool = True) -> None:
        """Open a book, resuming from its saved snapshot if asked to.

        The session ends up paused at the resolved position.

        Raises:
            EmptyBookError: If the book has no tracks (nothing changes)
        """
        if not book.tracks:
            raise EmptyBookError(f"Book '{book.name}' has no audio files")

        with self._lock:
            if self._state.book is not None:
                # Leaving another book: keep where we were in it
                self._pause_playback(persist=False)
                self._persist()

            logger.info(f"Loading book: {book.name} ({book.track_count} files)")
            track_count = book.track_count

            snapshot = self._read_snapshot(book.identity) if resume_from_snapshot else None
            if snapshot is not None:
                restored = restore_position(snapshot, track_count)
                queue = restored.queue
                cursor = restored.queue_cursor
                start_ms = restored.position_ms
                logger.info(
                    f"Resuming at queue position {cursor} (track {restored.track_index}), "
                    f"{start_ms}ms, saved queue {'restored' if restored.queue_restored else 'reset'}"
                )
            else:
                queue = identity_queue(track_count)
                cursor = 0
                start_ms = 0

            self._state = SessionState(
                book=book,
                queue=queue,
                queue_cursor=cursor,
                position_ms=start_ms,
                status=PlaybackStatus.LOADING,
            )
            self._state.sync_current_track()

            self._load_track(self._state.current_track_index, start_ms)
            self._notify_queue_changed()

    def _read_snapshot(self, book_identity: str) -> Optional[SessionSnapshot]:
        try:
            return self._store.load(book_identity)
        except Exception:
            logger.exception(f"Failed to read snapshot for {book_identity}")
            return None

    def _load_track(self, track_index: int, start_ms: int, resume: bool = False) -> bool:
        """Release the current handle and open track_index at start_ms.

        Failures are reported through notifications and leave the session
        with no track loaded.

        Returns:
            True if the track is loaded
        """
        state = self._state
        book = state.book
        if book is None:
            return False

        was_playing = state.is_playing
        self._release_engine()
        state.is_playing = False
        state.status = PlaybackStatus.LOADING
        state.position_ms = max(0, start_ms)

        if not 0 <= track_index < book.track_count:
            logger.error(
                f"Invalid file index: {track_index} (book has {book.track_count} files)"
            )
            state.status = PlaybackStatus.ERROR
            return False

        track = book.tracks[track_index]
        logger.debug(
            f"Loading file {track_index}: {track.name} "
            f"(readable={track.readable}, size={track.size} bytes)"
        )

        try:
            if not track.readable:
                raise TrackUnavailableError(f"File is not accessible: {track.name}")
            engine = self._engine_factory()
        except TrackUnavailableError as e:
            self._fail_load(track_index, str(e), "Cannot access file", was_playing)
            return False
        except Exception as e:
            logger.exception("Engine factory failed")
            self._fail_load(
                track_index, f"Cannot create audio engine: {e}", str(e), was_playing
            )
            return False

        try:
            duration = engine.load(track.source)
            start_ms = max(0, start_ms)
            if duration > 0:
                start_ms = min(start_ms, duration)
            if start_ms > 0:
                engine.seek_to(start_ms)
        except (EngineLoadError, EngineRuntimeError) as e:
            self._release_handle(engine)
            self._fail_load(
                track_index, f"Cannot load audio file: {track.name}\n{e}", str(e), was_playing
            )
            return False
        except Exception as e:
            logger.exception(f"Unexpected error loading file: {track.source}")
            self._release_handle(engine)
            self._fail_load(
                track_index,
                f"Unexpected error loading file: {track.name}\n{e}",
                str(e),
                was_playing,
            )
            return False

        epoch = self._epoch
        engine.set_completed_callback(lambda: self._handle_completed(epoch))
        engine.set_error_callback(lambda reason: self._handle_engine_error(epoch, reason))
        self._engine = engine
        self._duration_ms = max(0, duration)
        state.position_ms = start_ms
        state.status = PlaybackStatus.PAUSED

        logger.info(f"Loaded file {track_index}: {track.name} ({self._duration_ms}ms)")
        self._notifier.file_changed(track_index, track.name)
        self._notifier.progress(state.position_ms, self._duration_ms)
        self._present()

        if resume:
            self._start_playback()
        elif was_playing:
            self._notifier.playback_state_changed(False)
        return True

    def _fail_load(
        self, track_index: int, message: str, detail: str, was_playing: bool
    ) -> None:
        logger.error(message)
        self._state.status = PlaybackStatus.ERROR
        self._notifier.error(message)
        self._notifier.file_failed(track_index, detail)
        if was_playing:
            self._notifier.playback_state_changed(False)

    # ------------------------------------------------------------------
    # Transport

    def play(self) -> None:
        with self._lock:
            if self._engine is None:
                logger.warning("Cannot play: no track loaded")
                return
            if self._state.is_playing:
                return
            self._start_playback()

    def pause(self) -> None:
        """Pause and save the snapshot right away."""
        with self._lock:
            if self._engine is None or not self._state.is_playing:
                return
            self._pause_playback(persist=True)

    def toggle(self) -> None:
        with self._lock:
            if self._state.is_playing:
                self.pause()
            else:
                self.play()

    def seek_to(self, position_ms: int) -> None:
        """Seek within the current track, clamped to [0, duration]."""
        with self._lock:
            if self._engine is None:
                return
            target = max(0, position_ms)
            if self._duration_ms > 0:
                target = min(target, self._duration_ms)

            try:
                self._engine.seek_to(target)
            except Exception as e:
                logger.exception(f"Seek to {target}ms failed")
                self._notifier.error(f"Seek failed: {e}")
                self._notifier.progress(self._sample_position(), self._duration_ms)
                return

            self._state.position_ms = target
            self._notifier.progress(target, self._duration_ms)

    def rewind(self) -> None:
        with self._lock:
            if self._engine is None:
                logger.warning("Cannot rewind: no track loaded")
                return
            self.seek_to(self._sample_position() - self.skip_ms)

    def forward(self) -> None:
        with self._lock:
            if self._engine is None:
                logger.warning("Cannot forward: no track loaded")
                return
            self.seek_to(self._sample_position() + self.skip_ms)

    def next_track(self) -> None:
        with self._lock:
            if self._state.book is not None and self._state.has_next:
                self.move_to_queue_position(self._state.queue_cursor + 1)

    def previous_track(self) -> None:
        """Go back one queue entry; at the first entry, restart the track."""
        with self._lock:
            if self._state.book is None:
                return
            if self._state.has_previous:
                self.move_to_queue_position(self._state.queue_cursor - 1)
            else:
                self.seek_to(0)

    def stop(self) -> None:
        """Save, release the engine and close the book."""
        with self._lock:
            if self._state.book is None:
                return
            logger.info(f"Stopping playback of {self._state.book.name}")
            self._pause_playback(persist=False)
            self._persist()
            self._release_engine()
            self._state = SessionState()
            self._dismiss()

    def close(self) -> None:
        """Tear down the session. The last snapshot stays in the store."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._stop_ticker()
            if self._state.book is not None:
                self._persist()
            self._release_engine()
            self._state.is_playing = False
            self._dismiss()
            self._notifier.unsubscribe()
            logger.info("Playback session closed")

    def _start_playback(self) -> None:
        engine = self._engine
        if engine is None:
            return
        try:
            engine.play()
        except Exception as e:
            logger.exception("Cannot start playback")
            self._notifier.error(f"Cannot start playback: {e}")
            return

        self._state.is_playing = True
        self._state.status = PlaybackStatus.PLAYING
        self._start_ticker()
        self._notifier.playback_state_changed(True)
        self._present()

    def _pause_playback(self, persist: bool) -> None:
        self._stop_ticker()
        if not self._state.is_playing:
            return

        engine = self._engine
        if engine is not None:
            try:
                engine.pause()
            except Exception:
                logger.exception("Engine pause failed")
            self._sample_position()

        self._state.is_playing = False
        if self._state.status is PlaybackStatus.PLAYING:
            self._state.status = PlaybackStatus.PAUSED
        if persist:
            self._persist()
        self._notifier.playback_state_changed(False)
        self._present()

    # ------------------------------------------------------------------
    # Queue

    def move_to_queue_position(self, position: int) -> None:
        """Jump to a queue entry, keeping playback going if it was."""
        with self._lock:
            state = self._state
            if state.book is None:
                return
            if not 0 <= position < len(state.queue):
                logger.warning(
                    f"Ignoring move: queue position {position} out of range "
                    f"({len(state.queue)} entries)"
                )
                return

            was_playing = state.is_playing
            state.queue_cursor = position
            state.sync_current_track()
            self._load_track(state.current_track_index, 0, resume=was_playing)
            self._notify_queue_changed()
            self._persist()

    def reorder(self, from_position: int, to_position: int) -> None:
        """Move a queue entry. The loaded track never changes."""
        with self._lock:
            state = self._state
            if state.book is None:
                return
            try:
                queue, cursor = move_entry(
                    state.queue, state.queue_cursor, from_position, to_position
                )
            except InvalidIndexError as e:
                logger.warning(f"Ignoring reorder: {e}")
                return

            state.queue = queue
            state.queue_cursor = cursor
            state.sync_current_track()
            self._notify_queue_changed()
            self._persist()

    def remove(self, position: int) -> None:
        """Remove a queue entry; removing the loaded one loads its replacement."""
        with self._lock:
            state = self._state
            if state.book is None:
                return
            removing_current = position == state.queue_cursor
            try:
                queue, cursor = remove_entry(state.queue, state.queue_cursor, position)
            except InvalidIndexError as e:
                logger.warning(f"Ignoring remove: {e}")
                return

            state.queue = queue
            state.queue_cursor = cursor
            state.sync_current_track()
            if removing_current:
                self._load_track(
                    state.current_track_index, 0, resume=state.is_playing
                )
            self._notify_queue_changed()
            self._persist()

    def add(self, track_index: int, position: int = -1) -> None:
        """Insert a track into the queue (-1 appends). Never reloads."""
        with self._lock:
            state = self._state
            if state.book is None:
                return
            try:
                queue, cursor = insert_entry(
                    state.queue,
                    state.queue_cursor,
                    track_index,
                    state.book.track_count,
                    position,
                )
            except InvalidIndexError as e:
                logger.warning(f"Ignoring add: {e}")
                return

            state.queue = queue
            state.queue_cursor = cursor
            state.sync_current_track()
            self._notify_queue_changed()
            self._persist()

    def _notify_queue_changed(self) -> None:
        self._notifier.queue_changed(self._state.queue, self._state.queue_cursor)

    # ------------------------------------------------------------------
    # Engine events

    def _handle_completed(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch or self._state.book is None:
                logger.debug(f"Discarding stale completion (epoch={epoch})")
                return

            state = self._state
            logger.info(f"File completed: queue position {state.queue_cursor}")
            if state.has_next:
                state.queue_cursor += 1
                state.sync_current_track()
                self._load_track(state.current_track_index, 0, resume=True)
                self._notify_queue_changed()
                self._persist()
            else:
                logger.info(f"Finished book: {state.book.name}")
                self._pause_playback(persist=False)
                self._persist()

    def _handle_engine_error(self, epoch: int, reason: str) -> None:
        with self._lock:
            if epoch != self._epoch or self._state.book is None:
                logger.debug(f"Discarding stale engine error (epoch={epoch}): {reason}")
                return

            state = self._state
            track = state.book.tracks[state.current_track_index]
            message = f"Playback error: {reason}, file={track.name}"
            logger.error(message)

            was_playing = state.is_playing
            self._release_engine()
            state.is_playing = False
            state.status = PlaybackStatus.ERROR
            self._notifier.error(message)
            self._notifier.file_failed(state.current_track_index, "Playback failed")
            if was_playing:
                self._notifier.playback_state_changed(False)

    # ------------------------------------------------------------------
    # Ticker

    def _start_ticker(self) -> None:
        self._tick_generation += 1
        self._tick_epoch = self._epoch
        self._ticker.start(self._tick_generation)

    def _stop_ticker(self) -> None:
        self._tick_generation += 1
        self._ticker.stop()

    def _handle_tick(self, generation: int) -> None:
        with self._lock:
            if (
                generation != self._tick_generation
                or self._tick_epoch != self._epoch
                or not self._state.is_playing
                or self._engine is None
            ):
                logger.debug(f"Discarding stale tick (generation={generation})")
                return

            position = self._sample_position()
            self._notifier.progress(position, self._duration_ms)
            self._persist()

    # ------------------------------------------------------------------
    # Helpers

    def _sample_position(self) -> int:
        """Read the engine position into the state; keep the last known one on failure."""
        engine = self._engine
        if engine is not None:
            try:
                self._state.position_ms = max(0, engine.position_ms())
            except EngineRuntimeError:
                logger.debug("Engine position unavailable, keeping last known position")
            except Exception:
                logger.exception("Engine position read failed, keeping last known position")
        return self._state.position_ms

    def _persist(self) -> None:
        """Save the snapshot; failures are logged and ignored."""
        if self._state.book is None:
            return
        try:
            snapshot = SessionSnapshot.from_state(self._state, self._sample_position())
            self._store.save(snapshot)
        except Exception:
            logger.exception(f"Failed to save progress for {self._state.book.identity}")

    def _release_engine(self) -> None:
        self._stop_ticker()
        self._epoch += 1
        engine, self._engine = self._engine, None
        self._duration_ms = 0
        if engine is not None:
            self._release_handle(engine)

    @staticmethod
    def _release_handle(engine: EngineAdapter) -> None:
        try:
            engine.set_completed_callback(None)
            engine.set_error_callback(None)
            engine.release()
        except Exception:
            logger.exception("Failed to release engine handle")

    def _present(self) -> None:
        if self._presenter is None or self._state.book is None:
            return
        try:
            self._presenter.present(
                self._state.book, self._state.current_track_index, self._state.is_playing
            )
        except Exception:
            logger.exception("Presenter failed")

    def _dismiss(self) -> None:
        if self._presenter is None:
            return
        try:
            self._presenter.dismiss()
        except Exception:
            logger.exception("Presenter failed to dismiss")
