"""Core type definitions for pi-monitor."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Literal, Mapping, NamedTuple, Union

DecaySide = Literal["left", "right"]
TerminalProfile = Literal["apple-terminal", "iterm2", "warp", "generic"]
TerminalProfileChoice = Literal["auto", "apple-terminal", "iterm2", "warp", "generic"]
GlyphStyle = Literal["text", "image"]
GlyphStyleChoice = Literal["auto", "text", "image"]
ColorMode = Literal["dark", "light"]
ColorModeChoice = Literal["auto", "dark", "light"]
SymbolWidth = Union[Literal["auto"], int]
Width = Union[Literal["auto"], int]

DECAY_SIDES: tuple[str, ...] = ("left", "right")
TERMINAL_PROFILES: tuple[str, ...] = ("apple-terminal", "iterm2", "warp", "generic")
GLYPH_STYLES: tuple[str, ...] = ("text", "image")
COLOR_MODES: tuple[str, ...] = ("dark", "light")
SYMBOL_WIDTHS: tuple[int, ...] = (1, 2)


class MonitorConfigError(ValueError):
    """Raised when monitor options are invalid. Always raised before rendering."""


class BarState(str, Enum):
    OK = "ok"
    WARN = "warn"
    CRITICAL = "critical"


class Glyph(NamedTuple):
    """A resolved bar symbol: what to write and how many cells one copy takes."""

    sequence: str
    columns: int


def _is_positive_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


@dataclass
class FileState:
    dev: int
    ino: int
    size: int


@dataclass(frozen=True)
class MonitorOptions:
    """Validated, immutable monitor configuration."""

    logs: str
    warn_seconds: float
    critical_seconds: float
    ok_glyph: str
    warn_glyph: str
    critical_glyph: str
    decay_side: DecaySide = "left"
    refresh_ms: int = 250
    width: Width = "auto"
    hide_cursor: bool = True
    clear_on_events: bool = True
    terminal_profile: TerminalProfileChoice = "auto"
    symbol_width: SymbolWidth = "auto"
    glyph_style: GlyphStyleChoice = "auto"
    color_mode: ColorModeChoice = "auto"
    resolved_color_mode: ColorMode = "dark"

    def __post_init__(self) -> None:
        if not self.logs:
            raise MonitorConfigError("logs must be a non-empty glob pattern")
        for name in ("warn_seconds", "critical_seconds"):
            if not _is_positive_number(getattr(self, name)):
                raise MonitorConfigError(f"{name} must be a positive number")
        if self.critical_seconds <= self.warn_seconds:
            raise MonitorConfigError("critical_seconds must be greater than warn_seconds")
        for name in ("ok_glyph", "warn_glyph", "critical_glyph"):
            if not getattr(self, name):
                raise MonitorConfigError(f"{name} cannot be empty")
        if self.decay_side not in DECAY_SIDES:
            raise MonitorConfigError("decay_side must be 'left' or 'right'")
        if isinstance(self.refresh_ms, bool) or not isinstance(self.refresh_ms, int) or self.refresh_ms <= 0:
            raise MonitorConfigError("refresh_ms must be a positive integer")
        if self.width != "auto" and (
            isinstance(self.width, bool) or not isinstance(self.width, int) or self.width <= 0
        ):
            raise MonitorConfigError("width must be 'auto' or a positive integer")
        if self.terminal_profile != "auto" and self.terminal_profile not in TERMINAL_PROFILES:
            raise MonitorConfigError(
                f"terminal_profile must be one of: auto, {', '.join(TERMINAL_PROFILES)}"
            )
        if self.symbol_width != "auto" and self.symbol_width not in SYMBOL_WIDTHS:
            raise MonitorConfigError("symbol_width must be 'auto', 1 or 2")
        if self.glyph_style != "auto" and self.glyph_style not in GLYPH_STYLES:
            raise MonitorConfigError("glyph_style must be 'auto', 'text' or 'image'")
        if self.color_mode != "auto" and self.color_mode not in COLOR_MODES:
            raise MonitorConfigError("color_mode must be 'auto', 'dark' or 'light'")
        if self.resolved_color_mode not in COLOR_MODES:
            raise MonitorConfigError("resolved_color_mode must be 'dark' or 'light'")

    def text_glyph(self, state: BarState) -> str:
        if state is BarState.CRITICAL:
            return self.critical_glyph
        if state is BarState.WARN:
            return self.warn_glyph
        return self.ok_glyph


@dataclass(frozen=True)
class ResolvedTerminalConfig:
    """Rendering parameters fixed once per run."""

    profile: TerminalProfile
    draw_prefix: str
    symbol_width: int | None
    hide_cursor_supported: bool
    glyph_style: GlyphStyle
    color_mode: ColorMode
    image_glyphs: Mapping[BarState, str] | None = None
    glyphs: Mapping[BarState, Glyph] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only views so the resolved glyphs stay fixed for the run
        if self.image_glyphs is not None:
            object.__setattr__(self, "image_glyphs", MappingProxyType(dict(self.image_glyphs)))
        object.__setattr__(self, "glyphs", MappingProxyType(dict(self.glyphs)))
