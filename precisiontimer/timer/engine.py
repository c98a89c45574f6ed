"""Timer state machine for PrecisionTimer.

States
------
STOPPED       Inactive, waiting for ``start()``.
RUNNING       Started and counting toward the next fire instant.
PAUSED        Started but frozen (remaining time is held).

Transitions
-----------
STOPPED → RUNNING             (start)
RUNNING → PAUSED              (pause)
PAUSED → RUNNING              (resume)
RUNNING → STOPPED             (fires with ``run_once``)
Any → RUNNING                 (start again: restart)
Any → STOPPED                 (stop)

Timing model
------------
- Fire instants are derived from timestamps (start time, delay, paused
  time), never from counting ticks, so the mean interval doesn't wander.
- The machine never waits.  ``evaluate()`` returns the number of
  milliseconds after which the host should evaluate again, or ``None``.
- Evaluations that arrive late catch up on overdue periods.  An odd
  overdue count skips the evaluation and asks for a short re-arm instead,
  which bounds how often a starved host gets re-triggered.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerStatus(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


# ── constants ─────────────────────────────────────────────────────────────

NEVER = 2**53 - 1  # milliseconds representing forever in the future
RELIEF_VALVE_DELAY = 20  # ms to wait when skipping an overdue evaluation


def wall_clock() -> int:
    """Current Unix epoch time in whole milliseconds."""
    return time.time_ns() // 1_000_000


def _log_callback_error(exc: BaseException) -> None:
    logger.error("Timer callback failed: %s", exc, exc_info=exc)


# ── configuration ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerOptions:
    """Immutable per-instance configuration.

    ``delay`` is in milliseconds.  ``None`` or ``0`` turns the timer into a
    stopwatch that never fires.  ``fire_overdue_callbacks`` disables the
    skip-on-overdue behaviour of the callback: every missed period gets its
    own invocation, which can snowball if the callback is slower than the
    delay.
    """

    delay: int | None = None
    callback: Callable[[], Any] | None = None
    run_once: bool = False
    fire_immediately: bool = False
    start_immediately: bool = False
    fire_overdue_callbacks: bool = False
    relief_valve_delay: int = RELIEF_VALVE_DELAY

    def __post_init__(self) -> None:
        if self.delay is not None and self.delay < 0:
            raise ValueError("delay must not be negative")
        if self.relief_valve_delay <= 0:
            raise ValueError("relief_valve_delay must be positive")
        if self.callback is not None and not callable(self.callback):
            raise TypeError("callback must be callable")


# ── state machine ─────────────────────────────────────────────────────────


class PrecisionTimer:
    """Drift-free interval / one-shot timer that doubles as a stopwatch.

    All times are integer milliseconds on the ``clock`` time base (Unix
    epoch by default).  Timestamp accessors return ``-1`` when the value
    doesn't apply; duration accessors return ``0``.

    The instance is owned by a single host.  The host calls ``evaluate()``
    whenever it wants the timer to check for a fire, and schedules the
    next evaluation after the delay it returns.
    """

    def __init__(
        self,
        options: TimerOptions | None = None,
        *,
        clock: Callable[[], int] = wall_clock,
        on_error: Callable[[BaseException], None] = _log_callback_error,
    ) -> None:
        self._options: TimerOptions = options or TimerOptions()
        self._clock = clock
        self._on_error = on_error

        # ── temporal state ────────────────────────────────────────────
        self._started: bool = False
        self._start_time: int = NEVER
        self._last_fire_time: int = NEVER
        self._next_fire_time: int = NEVER
        self._pause_time: int = NEVER
        self._resume_time: int = NEVER
        self._period_paused: int = 0
        self._total_paused: int = 0

        # bumped by start()/stop() so evaluate() can tell when a callback
        # replaced the state underneath it
        self._generation: int = 0

        if self._options.start_immediately:
            self.start()

    # ══════════════════════════════════════════════════════════════════
    #  STATUS
    # ══════════════════════════════════════════════════════════════════

    @property
    def options(self) -> TimerOptions:
        return self._options

    @property
    def delay(self) -> int | None:
        return self._options.delay

    @property
    def is_started(self) -> bool:
        """True when started, even if paused."""
        return self._started

    @property
    def is_stopped(self) -> bool:
        return not self._started

    @property
    def is_paused(self) -> bool:
        return self._started and self._pause_time != NEVER

    @property
    def is_running(self) -> bool:
        """True when started and not paused."""
        return self._started and not self.is_paused

    @property
    def status(self) -> TimerStatus:
        if not self._started:
            return TimerStatus.STOPPED
        if self.is_paused:
            return TimerStatus.PAUSED
        return TimerStatus.RUNNING

    # ══════════════════════════════════════════════════════════════════
    #  TIMESTAMPS
    # ══════════════════════════════════════════════════════════════════

    @property
    def start_time(self) -> int:
        return self._start_time if self._started else -1

    @property
    def last_fire_time(self) -> int:
        if self._last_fire_time < NEVER and self.delay:
            return self._last_fire_time
        return -1

    @property
    def next_fire_time(self) -> int:
        if self.is_running and self.delay:
            return self._next_fire_time
        return -1

    @property
    def pause_time(self) -> int:
        return self._pause_time if self.is_paused else -1

    @property
    def resume_time(self) -> int:
        """Last time the timer was resumed, or started if never paused."""
        if self._started and self._resume_time < NEVER:
            return self._resume_time
        return -1

    # ══════════════════════════════════════════════════════════════════
    #  DURATIONS
    # ══════════════════════════════════════════════════════════════════

    @property
    def remaining_time(self) -> int:
        """Milliseconds until the next fire.

        While paused the value is frozen at the pause instant, measured from
        the start of the current period (last fire, or start if it never
        fired).
        """
        return self._remaining_at(self._clock())

    @property
    def elapsed_started_time(self) -> int:
        """Time since ``start()``, paused time included."""
        if self._started:
            return self._clock() - self._start_time
        return 0

    @property
    def elapsed_running_time(self) -> int:
        """Time since ``start()`` minus paused time.  Frozen while paused."""
        return self._elapsed_running_at(self._clock())

    @property
    def period_elapsed_paused_time(self) -> int:
        """Paused time since the last fire (or start)."""
        return self._period_paused + self._live_pause(self._clock())

    @property
    def total_elapsed_paused_time(self) -> int:
        return self._total_paused + self._live_pause(self._clock())

    @property
    def elapsed_resumed_time(self) -> int:
        if self.is_running:
            return self._clock() - self._resume_time
        return 0

    def snapshot(self) -> dict[str, Any]:
        """Every accessor read against a single clock reading.

        Use this when rendering several values at once; reading the
        properties one by one samples the clock once per property.
        """
        now = self._clock()
        live_pause = self._live_pause(now)
        return {
            "status": self.status,
            "start_time": self.start_time,
            "last_fire_time": self.last_fire_time,
            "next_fire_time": self.next_fire_time,
            "pause_time": self.pause_time,
            "resume_time": self.resume_time,
            "remaining_time": self._remaining_at(now),
            "elapsed_started_time": now - self._start_time if self._started else 0,
            "elapsed_running_time": self._elapsed_running_at(now),
            "period_elapsed_paused_time": self._period_paused + live_pause,
            "total_elapsed_paused_time": self._total_paused + live_pause,
            "elapsed_resumed_time": now - self._resume_time if self.is_running else 0,
        }

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, at_time: int | None = None) -> None:
        """Start the timer.  If already started, restart it.

        ``at_time`` is the start instant in clock milliseconds (defaults to
        now).  The host should evaluate afterwards to arm the first fire.
        """
        if at_time is None:
            at_time = self._clock()
        delay = self.delay
        if delay:
            fire_at = at_time if self._options.fire_immediately else at_time + delay
            next_fire = max(at_time, fire_at)
        else:
            next_fire = NEVER

        self._start_time = at_time
        self._last_fire_time = NEVER
        self._next_fire_time = next_fire
        self._pause_time = NEVER
        self._resume_time = at_time
        self._period_paused = 0
        self._total_paused = 0
        self._started = True
        self._generation += 1

    def stop(self) -> None:
        """Stop and reset to the inactive shape.  Safe to call repeatedly."""
        self._start_time = NEVER
        self._last_fire_time = NEVER
        self._next_fire_time = NEVER
        self._pause_time = NEVER
        self._resume_time = NEVER
        self._period_paused = 0
        self._total_paused = 0
        self._started = False
        self._generation += 1

    def pause(self) -> None:
        """Freeze the timer.  No-op unless running."""
        if not self.is_running:
            return
        self._pause_time = self._clock()
        self._resume_time = NEVER

    def resume(self) -> None:
        """Unfreeze a paused timer.  No-op unless paused."""
        if not self.is_paused:
            return
        now = self._clock()
        remaining = self._remaining_at(now)
        paused_for = now - self._pause_time
        self._total_paused += paused_for
        self._period_paused += paused_for
        if self.delay:
            self._next_fire_time = now + remaining
        self._pause_time = NEVER
        self._resume_time = now

    # ══════════════════════════════════════════════════════════════════
    #  EVALUATION
    # ══════════════════════════════════════════════════════════════════

    def evaluate(self) -> int | None:
        """Fire the callback if due and return the re-arm delay.

        Returns the number of milliseconds after which the host should call
        ``evaluate()`` again, or ``None`` when no wake-up is needed (stopped,
        paused, stopwatch mode, or a ``run_once`` timer that just fired).
        """
        delay = self.delay
        if not delay or self.is_paused:
            return None

        now = self._clock()
        overdue = 0
        if self._last_fire_time != NEVER:
            overdue = max(0, int((now - self._next_fire_time) // delay))

        if overdue % 2 == 1:
            # Can't keep up (tiny delay or slow callback).  Skip this round
            # and look again shortly.
            return self._options.relief_valve_delay

        if now >= self._next_fire_time:
            return self._fire(now, overdue)

        if self._next_fire_time < NEVER:
            return max(self._next_fire_time - self._clock(), 1)
        return None

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _fire(self, now: int, overdue: int) -> int | None:
        generation = self._generation
        calls = overdue + 1 if self._options.fire_overdue_callbacks else 1
        callback = self._options.callback
        if callback is not None:
            for _ in range(calls):
                try:
                    callback()
                except Exception as exc:
                    self._on_error(exc)

        if generation != self._generation:
            # The callback restarted or stopped the timer; leave its state
            # alone and let the next evaluation pick it up.
            return 1 if self._started else None

        self._last_fire_time = now
        self._period_paused = 0

        if self._options.run_once:
            self.stop()
            return None

        delay = self.delay
        self._next_fire_time = max(
            now, self._next_fire_time + delay + overdue * delay
        )
        if self.is_paused:
            # The callback paused the timer; resume() re-arms it.
            return None
        return max(self._next_fire_time - self._clock(), 1)

    def _live_pause(self, now: int) -> int:
        return now - self._pause_time if self.is_paused else 0

    def _remaining_at(self, now: int) -> int:
        delay = self.delay
        if not self._started or not delay:
            return 0
        if self.is_paused:
            edge = (
                self._last_fire_time
                if self._last_fire_time != NEVER
                else self._start_time
            )
            ran = self._pause_time - edge - self._period_paused
            return max(0, delay - ran)
        return max(0, self._next_fire_time - now)

    def _elapsed_running_at(self, now: int) -> int:
        if not self._started:
            return 0
        until = self._pause_time if self.is_paused else now
        return until - self._start_time - self._total_paused


# ── factories ─────────────────────────────────────────────────────────────


def delay_timer(
    delay: int,
    callback: Callable[[], Any],
    **kwargs: Any,
) -> PrecisionTimer:
    """One-shot timer that starts right away and fires once after ``delay``."""
    options = TimerOptions(
        delay=delay, callback=callback, run_once=True, start_immediately=True
    )
    return PrecisionTimer(options, **kwargs)


def stopwatch(*, start_immediately: bool = False, **kwargs: Any) -> PrecisionTimer:
    """Timer with no delay: tracks elapsed and paused time, never fires."""
    return PrecisionTimer(
        TimerOptions(start_immediately=start_immediately), **kwargs
    )
