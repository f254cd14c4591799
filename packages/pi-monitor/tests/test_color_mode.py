"""Tests for pi.monitor.color_mode."""

from __future__ import annotations

import subprocess

import pytest

from pi.monitor import color_mode
from pi.monitor.color_mode import (
    COLOR_MODE_RESOLVERS,
    detect_system_color_mode,
    query_apple_interface_style,
)


def _never_called() -> str:
    raise AssertionError("platform query should not run")


class TestDetectSystemColorMode:
    def test_env_override(self) -> None:
        assert detect_system_color_mode({"PI_MONITOR_COLOR_MODE": "light"}, "linux") == "light"
        assert detect_system_color_mode({"PI_COLOR_MODE": "dark"}, "linux") == "dark"

    def test_monitor_override_takes_precedence(self) -> None:
        env = {"PI_MONITOR_COLOR_MODE": "light", "PI_COLOR_MODE": "dark"}
        assert detect_system_color_mode(env, "linux") == "light"

    def test_env_override_skips_platform_query(self) -> None:
        mode = detect_system_color_mode(
            {"PI_COLOR_MODE": " Dark "}, "darwin", read_apple_interface_style=_never_called
        )
        assert mode == "dark"

    def test_invalid_override_is_ignored(self) -> None:
        assert detect_system_color_mode({"PI_COLOR_MODE": "sepia", "COLORFGBG": "0;15"}, "linux") == "light"

    def test_macos_dark_mode(self) -> None:
        assert detect_system_color_mode({}, "darwin", read_apple_interface_style=lambda: "Dark") == "dark"

    def test_macos_light_mode(self) -> None:
        assert detect_system_color_mode({}, "darwin", read_apple_interface_style=lambda: "") == "light"

    def test_macos_query_failure_reads_as_light(self) -> None:
        def _broken() -> str:
            raise OSError("defaults not found")

        assert detect_system_color_mode({}, "darwin", read_apple_interface_style=_broken) == "light"

    def test_colorfgbg_on_other_platforms(self) -> None:
        assert detect_system_color_mode({"COLORFGBG": "15;0"}, "linux") == "dark"
        assert detect_system_color_mode({"COLORFGBG": "0;15"}, "linux") == "light"
        assert detect_system_color_mode({"COLORFGBG": "15;default;0"}, "linux") == "dark"

    def test_unparseable_colorfgbg_uses_default(self) -> None:
        assert detect_system_color_mode({"COLORFGBG": "default;default"}, "linux") == "dark"

    def test_default_is_dark(self) -> None:
        assert detect_system_color_mode({}, "linux") == "dark"

    def test_resolver_order(self) -> None:
        names = [r.__name__ for r in COLOR_MODE_RESOLVERS]
        assert names == ["from_env_override", "from_platform", "from_colorfgbg", "from_default"]


class TestQueryAppleInterfaceStyle:
    def test_returns_stripped_output(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _run(*args, **kwargs):
            return subprocess.CompletedProcess(args[0], 0, stdout="Dark\n", stderr="")

        monkeypatch.setattr(color_mode.subprocess, "run", _run)
        assert query_apple_interface_style() == "Dark"

    def test_missing_key_is_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _run(*args, **kwargs):
            raise subprocess.CalledProcessError(1, args[0])

        monkeypatch.setattr(color_mode.subprocess, "run", _run)
        assert query_apple_interface_style() == ""

    def test_missing_binary_is_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _run(*args, **kwargs):
            raise FileNotFoundError("defaults")

        monkeypatch.setattr(color_mode.subprocess, "run", _run)
        assert query_apple_interface_style() == ""
