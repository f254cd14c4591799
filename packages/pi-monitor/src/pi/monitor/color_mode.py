"""Dark/light color mode detection.

Resolution runs an ordered chain of resolvers, each a pure function of a
:class:`ColorModeContext`; the first one that returns a mode wins:

1. ``PI_MONITOR_COLOR_MODE`` / ``PI_COLOR_MODE`` environment override
2. the platform appearance setting (macOS ``AppleInterfaceStyle``)
3. the ``COLORFGBG`` terminal heuristic
4. the fixed default (dark)
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Mapping

from pi.monitor.types import COLOR_MODES, ColorMode

logger = logging.getLogger(__name__)

COLOR_MODE_ENV_VARS: tuple[str, ...] = ("PI_MONITOR_COLOR_MODE", "PI_COLOR_MODE")
DEFAULT_COLOR_MODE: ColorMode = "dark"

# xterm palette indices that are dark backgrounds
_DARK_BACKGROUNDS = frozenset({0, 1, 2, 3, 4, 5, 6, 8})


def query_apple_interface_style() -> str:
    """Return the global ``AppleInterfaceStyle`` default, or "" when unset.

    ``defaults`` exits non-zero when the key is missing, which is how macOS
    represents light mode.
    """
    try:
        result = subprocess.run(
            ["defaults", "read", "-g", "AppleInterfaceStyle"],
            capture_output=True,
            text=True,
            timeout=2,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("AppleInterfaceStyle unavailable: %s", e)
        return ""
    return result.stdout.strip()


@dataclass(frozen=True)
class ColorModeContext:
    env: Mapping[str, str]
    platform: str
    read_apple_interface_style: Callable[[], str]


ColorModeResolver = Callable[[ColorModeContext], "ColorMode | None"]


def _normalize(value: str | None) -> ColorMode | None:
    normalized = (value or "").strip().lower()
    if normalized in COLOR_MODES:
        return normalized  # type: ignore[return-value]
    return None


def from_env_override(ctx: ColorModeContext) -> ColorMode | None:
    for name in COLOR_MODE_ENV_VARS:
        mode = _normalize(ctx.env.get(name))
        if mode is not None:
            return mode
    return None


def from_platform(ctx: ColorModeContext) -> ColorMode | None:
    if ctx.platform != "darwin":
        return None
    try:
        style = ctx.read_apple_interface_style()
    except Exception as e:
        logger.debug("Color mode query failed: %s", e)
        return "light"
    return "dark" if "dark" in (style or "").lower() else "light"


def from_colorfgbg(ctx: ColorModeContext) -> ColorMode | None:
    raw = ctx.env.get("COLORFGBG", "")
    if not raw:
        return None
    background = raw.split(";")[-1].strip()
    try:
        index = int(background)
    except ValueError:
        return None
    return "dark" if index in _DARK_BACKGROUNDS else "light"


def from_default(ctx: ColorModeContext) -> ColorMode | None:
    return DEFAULT_COLOR_MODE


COLOR_MODE_RESOLVERS: tuple[ColorModeResolver, ...] = (
    from_env_override,
    from_platform,
    from_colorfgbg,
    from_default,
)


def detect_system_color_mode(
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
    read_apple_interface_style: Callable[[], str] | None = None,
) -> ColorMode:
    ctx = ColorModeContext(
        env=os.environ if env is None else env,
        platform=sys.platform if platform is None else platform,
        read_apple_interface_style=read_apple_interface_style or query_apple_interface_style,
    )
    for resolver in COLOR_MODE_RESOLVERS:
        mode = resolver(ctx)
        if mode is not None:
            logger.debug("Color mode %s from %s", mode, resolver.__name__)
            return mode
    return DEFAULT_COLOR_MODE
