"""Option parsing and the optional settings file at ~/.pi/monitor.json."""

from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path
from typing import Any, Callable, Mapping

from pi.monitor.color_mode import detect_system_color_mode
from pi.monitor.types import (
    COLOR_MODES,
    DECAY_SIDES,
    GLYPH_STYLES,
    SYMBOL_WIDTHS,
    TERMINAL_PROFILES,
    ColorMode,
    MonitorConfigError,
    MonitorOptions,
)

logger = logging.getLogger(__name__)

DEFAULT_LOGS = "/tmp/pi/pi-*.log"
DEFAULT_WARN_SECONDS = 60.0
DEFAULT_CRITICAL_SECONDS = 120.0
DEFAULT_REFRESH_MS = 250

DEFAULT_OK_GLYPH = "🦞"
DEFAULT_WARN_GLYPHS: dict[str, str] = {"dark": "🟨", "light": "🟧"}
DEFAULT_CRITICAL_GLYPHS: dict[str, str] = {"dark": "⬜", "light": "⬛"}

# Settings file key -> option name
_SETTINGS_KEYS: dict[str, str] = {
    "logs": "logs",
    "warnSeconds": "warn_seconds",
    "criticalSeconds": "critical_seconds",
    "okEmoji": "ok_emoji",
    "warnEmoji": "warn_emoji",
    "criticalEmoji": "critical_emoji",
    "decaySide": "decay_side",
    "refreshMs": "refresh_ms",
    "width": "width",
    "hideCursor": "hide_cursor",
    "clearOnEvents": "clear_on_events",
    "terminalProfile": "terminal_profile",
    "emojiWidth": "emoji_width",
    "glyphStyle": "glyph_style",
    "colorMode": "color_mode",
}


# ---------------------------------------------------------------------------
# Settings file
# ---------------------------------------------------------------------------


def get_settings_path(env: Mapping[str, str] | None = None) -> Path:
    if env is None:
        env = os.environ
    config_dir = Path(env.get("PI_CONFIG_DIR") or Path.home() / ".pi")
    return config_dir / "monitor.json"


def settings_from_dict(data: Mapping[str, Any]) -> dict[str, Any]:
    """Translate camelCase settings keys to option names, dropping unknown keys."""
    raw: dict[str, Any] = {}
    for key, value in data.items():
        name = _SETTINGS_KEYS.get(key)
        if name is None:
            logger.warning("Ignoring unknown monitor setting %r", key)
            continue
        raw[name] = value
    return raw


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Load the settings file, returning ``{}`` when it does not exist."""
    if path is None:
        path = get_settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        raise MonitorConfigError(f"Error reading {path}: {e}") from e
    if not isinstance(data, dict):
        raise MonitorConfigError(f"{path} must contain a JSON object")
    logger.debug("Loaded monitor settings from %s", path)
    return settings_from_dict(data)


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def _parse_positive_number(value: Any, name: str) -> float:
    try:
        parsed = float(str(value).strip())
    except ValueError:
        raise MonitorConfigError(f"{name} must be a positive number") from None
    if not math.isfinite(parsed) or parsed <= 0:
        raise MonitorConfigError(f"{name} must be a positive number")
    return parsed


def _parse_positive_integer(value: Any, name: str) -> int:
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise MonitorConfigError(f"{name} must be a positive integer") from None
    if parsed <= 0:
        raise MonitorConfigError(f"{name} must be a positive integer")
    return parsed


def _parse_width(value: Any) -> int | str:
    normalized = str(value).strip().lower()
    if normalized == "auto":
        return "auto"
    try:
        parsed = int(normalized)
    except ValueError:
        raise MonitorConfigError("width must be 'auto' or a positive integer") from None
    if parsed <= 0:
        raise MonitorConfigError("width must be 'auto' or a positive integer")
    return parsed


def _parse_choice(value: Any, name: str, choices: tuple[str, ...]) -> str:
    normalized = str(value).strip().lower()
    if normalized not in choices:
        raise MonitorConfigError(f"{name} must be one of: {', '.join(choices)}")
    return normalized


def _parse_symbol_width(value: Any) -> int | str:
    normalized = str(value).strip().lower()
    if normalized == "auto":
        return "auto"
    if normalized not in {str(w) for w in SYMBOL_WIDTHS}:
        raise MonitorConfigError("emoji_width must be 'auto', 1 or 2")
    return int(normalized)


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    raise MonitorConfigError(f"{name} must be true or false")


def _parse_glyph(value: Any, default: str, name: str) -> str:
    if value is None:
        return default
    glyph = str(value)
    if not glyph:
        raise MonitorConfigError(f"{name} cannot be empty")
    return glyph


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


def parse_monitor_options(
    raw: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    detect_color_mode: Callable[[], ColorMode] | None = None,
) -> MonitorOptions:
    """Validate raw option values and build :class:`MonitorOptions`.

    *raw* uses option names (``warn_seconds``, ``ok_emoji``...) and may hold
    strings from the command line or typed values from the settings file.
    Missing or ``None`` values fall back to the defaults.
    """
    values = {k: v for k, v in (raw or {}).items() if v is not None}

    logs = str(values.get("logs", "")).strip() or DEFAULT_LOGS
    warn_seconds = _parse_positive_number(
        values.get("warn_seconds", DEFAULT_WARN_SECONDS), "warn_seconds"
    )
    critical_seconds = _parse_positive_number(
        values.get("critical_seconds", DEFAULT_CRITICAL_SECONDS), "critical_seconds"
    )
    if critical_seconds <= warn_seconds:
        raise MonitorConfigError("critical_seconds must be greater than warn_seconds")

    refresh_ms = _parse_positive_integer(values.get("refresh_ms", DEFAULT_REFRESH_MS), "refresh_ms")
    width = _parse_width(values.get("width", "auto"))
    decay_side = _parse_choice(values.get("decay_side", "left"), "decay_side", DECAY_SIDES)
    hide_cursor = _parse_bool(values.get("hide_cursor", True), "hide_cursor")
    clear_on_events = _parse_bool(values.get("clear_on_events", True), "clear_on_events")
    terminal_profile = _parse_choice(
        values.get("terminal_profile", "auto"), "terminal_profile", ("auto", *TERMINAL_PROFILES)
    )
    symbol_width = _parse_symbol_width(values.get("emoji_width", "auto"))
    glyph_style = _parse_choice(values.get("glyph_style", "auto"), "glyph_style", ("auto", *GLYPH_STYLES))
    color_mode = _parse_choice(values.get("color_mode", "auto"), "color_mode", ("auto", *COLOR_MODES))

    if color_mode != "auto":
        resolved_color_mode = color_mode
    elif detect_color_mode is not None:
        resolved_color_mode = detect_color_mode()
    else:
        resolved_color_mode = detect_system_color_mode(env)

    return MonitorOptions(
        logs=logs,
        warn_seconds=warn_seconds,
        critical_seconds=critical_seconds,
        ok_glyph=_parse_glyph(values.get("ok_emoji"), DEFAULT_OK_GLYPH, "ok_emoji"),
        warn_glyph=_parse_glyph(
            values.get("warn_emoji"), DEFAULT_WARN_GLYPHS[resolved_color_mode], "warn_emoji"
        ),
        critical_glyph=_parse_glyph(
            values.get("critical_emoji"), DEFAULT_CRITICAL_GLYPHS[resolved_color_mode], "critical_emoji"
        ),
        decay_side=decay_side,  # type: ignore[arg-type]
        refresh_ms=refresh_ms,
        width=width,  # type: ignore[arg-type]
        hide_cursor=hide_cursor,
        clear_on_events=clear_on_events,
        terminal_profile=terminal_profile,  # type: ignore[arg-type]
        symbol_width=symbol_width,  # type: ignore[arg-type]
        glyph_style=glyph_style,  # type: ignore[arg-type]
        color_mode=color_mode,  # type: ignore[arg-type]
        resolved_color_mode=resolved_color_mode,  # type: ignore[arg-type]
    )
