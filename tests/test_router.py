"""Tests for command routing and the command handlers."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from book_minion import router
from book_minion.context import AppContext
from book_minion.core.config import Config
from book_minion.domain.library.models import Book, Track
from book_minion.domain.playback import PlaybackStatus, SessionSnapshot


@pytest.fixture
def book() -> Book:
    tracks = tuple(Track(f"/books/dune/{i:02d}.mp3", f"{i:02d}.mp3") for i in (1, 2, 3))
    return Book(name="dune", identity="/books/dune", tracks=tracks)


@pytest.fixture
def ctx(book: Book) -> AppContext:
    """Context with a mocked controller that has a 3-file book open."""
    controller = MagicMock()
    controller.current_book = book
    controller.queue = [0, 1, 2]
    controller.queue_cursor = 0
    controller.current_track_index = 0
    controller.current_position = 30000
    controller.duration = 60000
    controller.is_playing = False
    controller.status = PlaybackStatus.PAUSED

    sleep_timer = MagicMock()
    sleep_timer.active = False

    return AppContext(
        config=Config(),
        controller=controller,
        store=MagicMock(),
        names=MagicMock(),
        sleep_timer=sleep_timer,
        console=None,
    )


class TestRouting:
    def test_quit_saves_and_stops_loop(self, ctx) -> None:
        _, should_continue = router.handle_command(ctx, "quit", [])

        assert should_continue is False
        ctx.sleep_timer.cancel.assert_called_once()
        ctx.controller.close.assert_called_once()

    def test_unknown_command_continues(self, ctx) -> None:
        _, should_continue = router.handle_command(ctx, "frobnicate", [])
        assert should_continue is True

    def test_empty_command(self, ctx) -> None:
        assert router.handle_command(ctx, "", []) == (ctx, True)

    @pytest.mark.parametrize(
        "command,method",
        [
            ("play", "play"),
            ("pause", "pause"),
            ("rewind", "rewind"),
            ("forward", "forward"),
            ("next", "next_track"),
            ("prev", "previous_track"),
            ("stop", "stop"),
        ],
    )
    def test_transport(self, ctx, command, method) -> None:
        router.handle_command(ctx, command, [])
        getattr(ctx.controller, method).assert_called_once()

    def test_transport_without_book(self, ctx) -> None:
        ctx.controller.current_book = None

        router.handle_command(ctx, "play", [])

        ctx.controller.play.assert_not_called()

    def test_next_at_last_entry(self, ctx) -> None:
        ctx.controller.queue_cursor = 2

        router.handle_command(ctx, "next", [])

        ctx.controller.next_track.assert_not_called()


class TestSeekCommand:
    @pytest.mark.parametrize(
        "arg,target",
        [("1:30", 90000), ("45", 45000), ("+10", 40000), ("-1:00", -30000)],
    )
    def test_targets(self, ctx, arg, target) -> None:
        router.handle_command(ctx, "seek", [arg])
        ctx.controller.seek_to.assert_called_once_with(target)

    def test_invalid_time(self, ctx) -> None:
        router.handle_command(ctx, "seek", ["soon"])
        ctx.controller.seek_to.assert_not_called()


class TestQueueCommands:
    """Tests for 1-based queue positions typed by the user."""

    def test_goto(self, ctx) -> None:
        router.handle_command(ctx, "goto", ["2"])
        ctx.controller.move_to_queue_position.assert_called_once_with(1)

    @pytest.mark.parametrize("arg", ["0", "4", "two"])
    def test_goto_invalid(self, ctx, arg) -> None:
        router.handle_command(ctx, "goto", [arg])
        ctx.controller.move_to_queue_position.assert_not_called()

    def test_move(self, ctx) -> None:
        router.handle_command(ctx, "move", ["1", "3"])
        ctx.controller.reorder.assert_called_once_with(0, 2)

    def test_remove(self, ctx) -> None:
        router.handle_command(ctx, "remove", ["3"])
        ctx.controller.remove.assert_called_once_with(2)

    def test_remove_only_entry_refused(self, ctx) -> None:
        ctx.controller.queue = [0]

        router.handle_command(ctx, "remove", ["1"])

        ctx.controller.remove.assert_not_called()

    def test_add_appends(self, ctx) -> None:
        router.handle_command(ctx, "add", ["3"])
        ctx.controller.add.assert_called_once_with(2, -1)

    def test_add_at_position(self, ctx) -> None:
        router.handle_command(ctx, "add", ["3", "1"])
        ctx.controller.add.assert_called_once_with(2, 0)

    def test_queue_listing(self, ctx) -> None:
        assert router.handle_command(ctx, "queue", []) == (ctx, True)


class TestSleepCommand:
    def test_start(self, ctx) -> None:
        router.handle_command(ctx, "sleep", ["20"])
        ctx.sleep_timer.start.assert_called_once_with(20)

    def test_default_length(self, ctx) -> None:
        router.handle_command(ctx, "sleep", [])
        ctx.sleep_timer.start.assert_called_once_with(30)

    def test_cancel(self, ctx) -> None:
        router.handle_command(ctx, "sleep", ["off"])
        ctx.sleep_timer.cancel.assert_called_once()

    def test_rejected_length(self, ctx) -> None:
        ctx.sleep_timer.start.side_effect = ValueError("too long")

        _, should_continue = router.handle_command(ctx, "sleep", ["999"])

        assert should_continue is True


class TestOpenCommand:
    """Tests for opening a book from files."""

    @pytest.fixture
    def files(self, tmp_path: Path) -> list[str]:
        folder = tmp_path / "Dune"
        folder.mkdir()
        paths = []
        for name in ("01.mp3", "02.mp3"):
            (folder / name).write_bytes(b"audio")
            paths.append(str(folder / name))
        return paths

    def test_open_fresh(self, ctx, files) -> None:
        ctx.names.display_name.return_value = "Dune"

        router.handle_command(ctx, "open", files + ["--fresh"])

        args, kwargs = ctx.controller.load_book.call_args
        assert args[0].track_count == 2
        assert args[0].name == "Dune"
        assert kwargs == {"resume_from_snapshot": False}
        ctx.controller.play.assert_not_called()

    def test_open_resumes_and_autoplays(self, ctx, files) -> None:
        ctx.names.display_name.return_value = "Dune"
        ctx.config.player.autoplay_on_load = True

        router.handle_command(ctx, "open", files)

        assert ctx.controller.load_book.call_args.kwargs == {"resume_from_snapshot": True}
        ctx.controller.play.assert_called_once()

    def test_open_without_files(self, ctx) -> None:
        router.handle_command(ctx, "open", [])
        ctx.controller.load_book.assert_not_called()


class TestLibraryCommands:
    def test_progress(self, ctx) -> None:
        ctx.store.load_all.return_value = {
            "/books/dune": SessionSnapshot("/books/dune", 1, 61000, (0, 1, 2), 1)
        }
        ctx.names.get.return_value = None

        assert router.handle_command(ctx, "progress", []) == (ctx, True)

    def test_forget_open_book(self, ctx) -> None:
        router.handle_command(ctx, "forget", [])
        ctx.store.clear.assert_called_once_with("/books/dune")

    def test_forget_named_folder(self, ctx) -> None:
        router.handle_command(ctx, "forget", ["/books/other", "book"])
        ctx.store.clear.assert_called_once_with("/books/other book")

    def test_rename(self, ctx) -> None:
        router.handle_command(ctx, "rename", ["Dune", "(Unabridged)"])
        ctx.names.save.assert_called_once_with("/books/dune", "Dune (Unabridged)")

    def test_rename_without_name_clears(self, ctx) -> None:
        router.handle_command(ctx, "rename", [])
        ctx.names.clear.assert_called_once_with("/books/dune")
