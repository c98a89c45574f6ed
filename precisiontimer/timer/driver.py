"""Qt host for :class:`PrecisionTimer`.

The state machine never waits on its own; after every evaluation it says
how long to wait before the next one.  ``TimerDriver`` turns that into a
single-shot ``QTimer`` on the Qt event loop and re-publishes the timer's
activity as signals a widget can bind to.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from PyQt6.QtCore import QObject, Qt, QTimer, pyqtSignal

from .engine import PrecisionTimer, TimerOptions, TimerStatus, wall_clock

logger = logging.getLogger(__name__)

# QTimer intervals are signed 32-bit milliseconds.
MAX_WAKEUP_INTERVAL = 2**31 - 1


class TimerDriver(QObject):
    """Drives one ``PrecisionTimer`` from the Qt event loop.

    Signals
    -------
    fired()
        Emitted on every callback invocation (catch-up calls included).
    state_changed(new_status: TimerStatus)
        Emitted when a command or an evaluation changes the status.
    callback_failed(exc: Exception)
        Emitted when the user callback raises.  The timer keeps going.
    rearmed(interval_ms: int)
        Emitted each time the wake-up is scheduled, with the interval used.
    """

    fired = pyqtSignal()
    state_changed = pyqtSignal(object)
    callback_failed = pyqtSignal(object)
    rearmed = pyqtSignal(int)

    def __init__(
        self,
        options: TimerOptions | None = None,
        parent: QObject | None = None,
        *,
        clock: Callable[[], int] = wall_clock,
    ) -> None:
        super().__init__(parent)
        options = options or TimerOptions()
        self._callback = options.callback

        # ── wake-up timer ─────────────────────────────────────────────
        self._wakeup = QTimer(self)
        self._wakeup.setSingleShot(True)
        self._wakeup.setTimerType(Qt.TimerType.PreciseTimer)
        self._wakeup.timeout.connect(self.check)

        # ── state machine ─────────────────────────────────────────────
        self._timer = PrecisionTimer(
            replace(options, callback=self._on_fire),
            clock=clock,
            on_error=self._on_callback_error,
        )
        self._status: TimerStatus = self._timer.status

        if self._timer.is_started:
            self.check()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def timer(self) -> PrecisionTimer:
        """The state machine, for accessor reads."""
        return self._timer

    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def wakeup_pending(self) -> bool:
        return self._wakeup.isActive()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, at_time: int | None = None) -> None:
        """Start (or restart) the timer and arm the first wake-up."""
        self._timer.start(at_time)
        self.check()

    def stop(self) -> None:
        self._wakeup.stop()
        self._timer.stop()
        self._sync_status()

    def pause(self) -> None:
        self._timer.pause()
        self.check()

    def resume(self) -> None:
        self._timer.resume()
        self.check()

    def check(self) -> None:
        """Evaluate now and replace any pending wake-up with a fresh one."""
        self._wakeup.stop()
        delay = self._timer.evaluate()
        self._sync_status()
        if delay is None:
            return
        interval = int(min(delay, MAX_WAKEUP_INTERVAL))
        self._wakeup.start(interval)
        self.rearmed.emit(interval)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_fire(self) -> None:
        self.fired.emit()
        if self._callback is not None:
            self._callback()

    def _on_callback_error(self, exc: BaseException) -> None:
        logger.error("Timer callback failed: %s", exc, exc_info=exc)
        self.callback_failed.emit(exc)

    def _sync_status(self) -> None:
        status = self._timer.status
        if status != self._status:
            self._status = status
            self.state_changed.emit(status)
