"""Timer package."""

from .engine import (
    PrecisionTimer,
    TimerOptions,
    TimerStatus,
    NEVER,
    RELIEF_VALVE_DELAY,
    wall_clock,
    delay_timer,
    stopwatch,
)
from .driver import TimerDriver

__all__ = [
    "PrecisionTimer",
    "TimerOptions",
    "TimerStatus",
    "NEVER",
    "RELIEF_VALVE_DELAY",
    "wall_clock",
    "delay_timer",
    "stopwatch",
    "TimerDriver",
]
