"""Status line rendering: elapsed prefix plus a three-state decay bar."""

from __future__ import annotations

import math

from pi.monitor.types import (
    BarState,
    DecaySide,
    Glyph,
    MonitorOptions,
    ResolvedTerminalConfig,
)
from pi.monitor.width import display_width


def format_elapsed(seconds: float) -> str:
    """Format *seconds* as ``mm:ss``, or ``hh:mm:ss`` from one hour on."""
    total = max(0, math.floor(seconds))
    hours, rest = divmod(total, 3600)
    mins, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def classify(idle_seconds: float, options: MonitorOptions) -> BarState:
    if idle_seconds >= options.critical_seconds:
        return BarState.CRITICAL
    if idle_seconds >= options.warn_seconds:
        return BarState.WARN
    return BarState.OK


def text_glyph(symbol: str, symbol_width: int | str = "auto") -> Glyph:
    """Build a glyph for a plain text symbol, measuring it unless overridden."""
    if isinstance(symbol_width, int):
        return Glyph(symbol, symbol_width)
    return Glyph(symbol, max(1, display_width(symbol)))


def _repeat_to_width(glyph: Glyph, columns: int) -> int:
    """Number of glyph copies that fit in *columns* (at least one if any fit)."""
    if columns <= 0:
        return 0
    return max(1, columns // max(1, glyph.columns))


def _layout(
    glyph: Glyph,
    filled_columns: int,
    total_columns: int,
    decay_side: DecaySide,
) -> tuple[str, int]:
    if total_columns <= 0:
        return "", 0

    clamped = max(0, min(int(filled_columns), total_columns))
    count = _repeat_to_width(glyph, clamped)
    used = min(total_columns, count * glyph.columns)
    gap = " " * (total_columns - used)
    bar = glyph.sequence * count
    width = len(gap) + count * glyph.columns

    if decay_side == "left":
        return f"{gap}{bar}", width
    return f"{bar}{gap}", width


def build_bar_area(
    glyph: Glyph,
    filled_columns: int,
    total_columns: int,
    decay_side: DecaySide,
) -> str:
    """Lay out *filled_columns* of *glyph* in a *total_columns* wide area.

    ``left`` decay keeps the bar flush against the right edge so the blank
    space grows from the left; ``right`` decay is the mirror image.
    """
    return _layout(glyph, filled_columns, total_columns, decay_side)[0]


def _glyph_for(
    state: BarState,
    options: MonitorOptions,
    config: ResolvedTerminalConfig | None,
) -> Glyph:
    if config is not None and state in config.glyphs:
        return config.glyphs[state]
    return text_glyph(options.text_glyph(state), options.symbol_width)


def render_line_with_width(
    options: MonitorOptions,
    idle_ms: float,
    total_columns: int,
    config: ResolvedTerminalConfig | None = None,
) -> tuple[str, int]:
    """Render the status line and return it with its visual width in cells."""
    idle_seconds = max(0.0, idle_ms / 1000)
    prefix = f"[{format_elapsed(idle_seconds)}] "
    prefix_width = display_width(prefix)
    available = max(0, total_columns - prefix_width)

    state = classify(idle_seconds, options)
    glyph = _glyph_for(state, options, config)

    if state is BarState.CRITICAL:
        # Critical always reads as a solid bar, whatever the decay side
        area, area_width = _layout(glyph, available, available, "left")
    else:
        remaining = max(0.0, 1 - idle_seconds / options.critical_seconds)
        filled = math.floor(available * remaining + 0.5)
        area, area_width = _layout(glyph, filled, available, options.decay_side)

    return f"{prefix}{area}", prefix_width + area_width


def render_line(
    options: MonitorOptions,
    idle_ms: float,
    total_columns: int,
    config: ResolvedTerminalConfig | None = None,
) -> str:
    return render_line_with_width(options, idle_ms, total_columns, config)[0]
