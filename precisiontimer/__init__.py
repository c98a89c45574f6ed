"""PrecisionTimer: drift-free timers and stopwatches for Qt applications."""

from .timer import (
    PrecisionTimer,
    TimerDriver,
    TimerOptions,
    TimerStatus,
    NEVER,
    delay_timer,
    stopwatch,
)

__all__ = [
    "PrecisionTimer",
    "TimerDriver",
    "TimerOptions",
    "TimerStatus",
    "NEVER",
    "delay_timer",
    "stopwatch",
]
