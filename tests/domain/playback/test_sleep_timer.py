"""Tests for the sleep timer and the progress ticker threads."""

import threading

import pytest

from book_minion.domain.playback.sleep_timer import SleepTimer
from book_minion.domain.playback.ticker import ProgressTicker


@pytest.fixture
def expired() -> list:
    return []


@pytest.fixture
def timer(expired):
    t = SleepTimer(on_expire=lambda: expired.append(True), max_minutes=480)
    yield t
    t.cancel()


class TestSleepTimer:
    """Tests for the pause-after-N-minutes timer."""

    @pytest.mark.parametrize("minutes", [0, -5, 481])
    def test_rejects_out_of_range(self, timer, minutes) -> None:
        with pytest.raises(ValueError):
            timer.start(minutes)
        assert timer.active is False

    def test_start_and_cancel(self, timer, expired) -> None:
        timer.start(30)

        assert timer.active is True
        assert 29 * 60 < timer.remaining_seconds() <= 30 * 60

        assert timer.cancel() is True
        assert timer.active is False
        assert timer.remaining_seconds() == 0
        assert timer.cancel() is False
        assert expired == []

    def test_expiry_calls_action_once(self, timer, expired) -> None:
        timer.start(1)

        timer._expire(timer._generation)
        timer._expire(timer._generation)

        assert expired == [True]
        assert timer.active is False

    def test_restart_replaces_running_countdown(self, timer, expired) -> None:
        """Test an expiry from a replaced countdown does nothing."""
        timer.start(5)
        old_generation = timer._generation
        timer.start(10)

        timer._expire(old_generation)

        assert expired == []
        assert timer.active is True
        assert timer.remaining_seconds() > 9 * 60

    def test_failing_action_is_logged(self) -> None:
        def explode() -> None:
            raise RuntimeError("boom")

        timer = SleepTimer(on_expire=explode)
        timer.start(1)

        timer._expire(timer._generation)

        assert timer.active is False


class TestProgressTicker:
    """Tests for the background progress ticker."""

    def test_ticks_with_its_epoch(self) -> None:
        ticked = threading.Event()
        epochs = []

        def on_tick(epoch: int) -> None:
            epochs.append(epoch)
            ticked.set()

        ticker = ProgressTicker(on_tick, interval=0.01)
        ticker.start(7)
        try:
            assert ticked.wait(2.0)
        finally:
            ticker.stop()

        assert epochs[0] == 7
        assert ticker.running is False

    def test_restart_uses_new_epoch(self) -> None:
        seen = []
        second = threading.Event()

        def on_tick(epoch: int) -> None:
            seen.append(epoch)
            if epoch == 2:
                second.set()

        ticker = ProgressTicker(on_tick, interval=0.01)
        ticker.start(1)
        ticker.start(2)
        try:
            assert second.wait(2.0)
        finally:
            ticker.stop()

        assert ticker.running is False
        assert 2 in seen
