"""Tests for JSON-persisted timer settings."""

import json
from pathlib import Path

import pytest

from precisiontimer.settings import (
    Settings, load_settings, save_settings, app_support_dir,
    SETTINGS_PATH, APP_SUPPORT_DIR,
)
from precisiontimer.timer.engine import RELIEF_VALVE_DELAY, TimerOptions


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.delay == 1000
        assert s.run_once is False
        assert s.fire_overdue_callbacks is False
        assert s.relief_valve_delay == RELIEF_VALVE_DELAY

    def test_default_path(self):
        assert SETTINGS_PATH.parent == APP_SUPPORT_DIR
        assert SETTINGS_PATH.name == "settings.json"

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "nope.json") == Settings()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        save_settings(Settings(delay=250, run_once=True), path)
        loaded = load_settings(path)
        assert loaded.delay == 250
        assert loaded.run_once is True

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"delay": 40, "theme": "dark"}))
        assert load_settings(path) == Settings(delay=40)

    def test_malformed_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert load_settings(path) == Settings()

    def test_non_object_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]")
        assert load_settings(path) == Settings()

    def test_timer_options(self):
        def cb():
            pass

        options = Settings(delay=300, fire_immediately=True).timer_options(cb)
        assert isinstance(options, TimerOptions)
        assert options.delay == 300
        assert options.fire_immediately is True
        assert options.callback is cb

    def test_invalid_settings_fail_when_building_options(self):
        with pytest.raises(ValueError):
            Settings(delay=-5).timer_options()

    def test_wrongly_typed_value_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"delay": "fast"}))
        assert load_settings(path) == Settings()

    def test_out_of_range_value_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"delay": 100, "relief_valve_delay": 0}))
        assert load_settings(path) == Settings()


class TestAppSupportDir:

    def test_macos(self):
        path = app_support_dir("darwin", {})
        assert path == Path.home() / "Library" / "Application Support" / "PrecisionTimer"

    def test_windows_uses_appdata(self, tmp_path):
        path = app_support_dir("win32", {"APPDATA": str(tmp_path)})
        assert path == tmp_path / "PrecisionTimer"

    def test_windows_without_appdata(self):
        path = app_support_dir("win32", {})
        assert path == Path.home() / "AppData" / "Roaming" / "PrecisionTimer"

    def test_linux_uses_xdg_config_home(self, tmp_path):
        path = app_support_dir("linux", {"XDG_CONFIG_HOME": str(tmp_path)})
        assert path == tmp_path / "precisiontimer"

    def test_linux_defaults_to_dot_config(self):
        path = app_support_dir("linux", {})
        assert path == Path.home() / ".config" / "precisiontimer"
