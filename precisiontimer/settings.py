"""Default timer settings with JSON persistence.

Settings are stored in the per-user application directory:
    macOS    ~/Library/Application Support/PrecisionTimer/settings.json
    Windows  %APPDATA%\\PrecisionTimer\\settings.json
    other    $XDG_CONFIG_HOME/precisiontimer/settings.json (~/.config)

Usage::

    settings = load_settings()
    settings.delay = 250
    save_settings(settings)
    timer = PrecisionTimer(settings.timer_options(on_tick))
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Callable, Mapping

from .timer.engine import RELIEF_VALVE_DELAY, TimerOptions


def app_support_dir(
    platform: str = sys.platform,
    environ: Mapping[str, str] = os.environ,
) -> Path:
    """Per-user directory for PrecisionTimer files on ``platform``."""
    home = Path.home()
    if platform == "darwin":
        return home / "Library" / "Application Support" / "PrecisionTimer"
    if platform == "win32":
        base = environ.get("APPDATA")
        root = Path(base) if base else home / "AppData" / "Roaming"
        return root / "PrecisionTimer"
    base = environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else home / ".config"
    return root / "precisiontimer"


APP_SUPPORT_DIR = app_support_dir()
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """Defaults applied to timers built from settings."""

    # ── timing ────────────────────────────────────────────────────────
    delay: int | None = 1000               # ms; None/0 = stopwatch
    run_once: bool = False
    fire_immediately: bool = False
    start_immediately: bool = False

    # ── overload handling ─────────────────────────────────────────────
    fire_overdue_callbacks: bool = False
    relief_valve_delay: int = RELIEF_VALVE_DELAY   # ms

    def timer_options(
        self, callback: Callable[[], Any] | None = None
    ) -> TimerOptions:
        """Build validated ``TimerOptions`` from these settings."""
        return TimerOptions(callback=callback, **asdict(self))


def load_settings(path: Path = SETTINGS_PATH) -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            settings = Settings(**filtered)
            settings.timer_options()  # reject values a timer can't use
            return settings
    except (OSError, ValueError, TypeError, AttributeError):
        pass
    return Settings()


def save_settings(settings: Settings, path: Path = SETTINGS_PATH) -> None:
    """Write settings to disk as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
