"""Shared pytest fixtures for PrecisionTimer tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from precisiontimer.timer.engine import PrecisionTimer, TimerOptions

from helpers import CallRecorder, FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture
def clock():
    """Fake millisecond clock starting at t=1000."""
    return FakeClock(1000)


@pytest.fixture
def callback():
    return CallRecorder()


@pytest.fixture
def make_timer(clock, callback):
    """Factory for timers on the fake clock, wired to ``callback``."""

    def _make(**options):
        options.setdefault("callback", callback)
        errors: list = []
        timer = PrecisionTimer(
            TimerOptions(**options), clock=clock, on_error=errors.append
        )
        timer.errors = errors
        return timer

    return _make


@pytest.fixture
def timer(make_timer):
    """Repeating 500 ms timer, not started."""
    return make_timer(delay=500)


@pytest.fixture
def watch(clock):
    """Stopwatch (no delay), not started."""
    return PrecisionTimer(TimerOptions(), clock=clock)
