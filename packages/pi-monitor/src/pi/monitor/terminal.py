"""Terminal profiles and the stdout wrapper used by the render loop.

A terminal profile captures the quirks the monitor has to work around:
how to redraw the line in place, how wide emoji are, whether hiding the
cursor is safe and whether inline images are available. The profile and
everything derived from it are resolved once per run into a
:class:`~pi.monitor.types.ResolvedTerminalConfig`.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, TextIO

from pi.monitor.glyphs import image_glyph_set
from pi.monitor.render import text_glyph
from pi.monitor.types import (
    BarState,
    Glyph,
    GlyphStyle,
    MonitorOptions,
    ResolvedTerminalConfig,
    TerminalProfile,
)
from pi.monitor.width import display_width

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

CARRIAGE_RETURN = "\r"
CLEAR_LINE = "\x1b[2K\r"
CLEAR_SCREEN = "\x1b[2J\x1b[H"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"

IMAGE_SYMBOL_WIDTH = 2


# ---------------------------------------------------------------------------
# Profile table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProfileTraits:
    draw_prefix: str
    emoji_width: int | None
    hide_cursor: bool
    inline_images: bool
    default_glyph_style: GlyphStyle


PROFILE_TRAITS: dict[str, ProfileTraits] = {
    "apple-terminal": ProfileTraits(
        draw_prefix=CARRIAGE_RETURN,
        emoji_width=2,
        hide_cursor=True,
        inline_images=False,
        default_glyph_style="text",
    ),
    "iterm2": ProfileTraits(
        draw_prefix=CARRIAGE_RETURN,
        emoji_width=2,
        hide_cursor=True,
        inline_images=True,
        default_glyph_style="image",
    ),
    # Warp leaves artifacts behind when glyph widths change between redraws
    "warp": ProfileTraits(
        draw_prefix=CLEAR_LINE,
        emoji_width=2,
        hide_cursor=False,
        inline_images=False,
        default_glyph_style="text",
    ),
    "generic": ProfileTraits(
        draw_prefix=CARRIAGE_RETURN,
        emoji_width=None,
        hide_cursor=True,
        inline_images=False,
        default_glyph_style="text",
    ),
}

# (profile, state, glyph) -> replacement. Warp draws the hollow white
# square as an outline that disappears on most themes.
GLYPH_COMPAT: dict[tuple[str, BarState, str], str] = {
    ("warp", BarState.CRITICAL, "⬜"): "██",
}

_TERM_PROGRAM_PROFILES: dict[str, TerminalProfile] = {
    "apple_terminal": "apple-terminal",
    "iterm.app": "iterm2",
    "warpterminal": "warp",
}


def detect_terminal_profile(env: Mapping[str, str] | None = None) -> TerminalProfile:
    if env is None:
        env = os.environ
    term_program = env.get("TERM_PROGRAM", "").strip().lower()
    profile = _TERM_PROGRAM_PROFILES.get(term_program)
    if profile is not None:
        return profile
    # iTerm2 forwards LC_TERMINAL over ssh, TERM_PROGRAM is lost there
    if not term_program and env.get("LC_TERMINAL", "").lower() == "iterm2":
        return "iterm2"
    return "generic"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def _resolve_glyph_style(options: MonitorOptions, profile: TerminalProfile) -> GlyphStyle:
    traits = PROFILE_TRAITS[profile]
    if options.glyph_style == "auto":
        return traits.default_glyph_style
    if options.glyph_style == "image" and not traits.inline_images:
        logger.warning(
            "Terminal profile %s cannot show inline images; using text glyphs", profile
        )
        return "text"
    return options.glyph_style


def _resolve_symbol_width(
    options: MonitorOptions, profile: TerminalProfile, glyph_style: GlyphStyle
) -> int | None:
    if options.symbol_width != "auto":
        return options.symbol_width
    if glyph_style == "image":
        return IMAGE_SYMBOL_WIDTH
    return PROFILE_TRAITS[profile].emoji_width


def _resolve_text_glyph(
    options: MonitorOptions,
    profile: TerminalProfile,
    state: BarState,
    symbol_width: int | None,
) -> Glyph:
    symbol = options.text_glyph(state)
    symbol = GLYPH_COMPAT.get((profile, state, symbol), symbol)
    if options.symbol_width != "auto":
        return Glyph(symbol, options.symbol_width)
    measured = display_width(symbol)
    # The profile's emoji width only applies to a single wide symbol;
    # multi-symbol glyphs keep their measured width
    if symbol_width is not None and measured == 2:
        return Glyph(symbol, symbol_width)
    return text_glyph(symbol)


def resolve_terminal_config(
    options: MonitorOptions,
    env: Mapping[str, str] | None = None,
) -> ResolvedTerminalConfig:
    """Derive the run-fixed rendering parameters from *options* and *env*."""
    if options.terminal_profile != "auto":
        profile: TerminalProfile = options.terminal_profile  # type: ignore[assignment]
    else:
        profile = detect_terminal_profile(env)
    traits = PROFILE_TRAITS[profile]

    glyph_style = _resolve_glyph_style(options, profile)
    symbol_width = _resolve_symbol_width(options, profile, glyph_style)
    color_mode = options.resolved_color_mode

    image_glyphs: dict[BarState, str] | None = None
    glyphs: dict[BarState, Glyph]
    if glyph_style == "image":
        columns = symbol_width or IMAGE_SYMBOL_WIDTH
        image_glyphs = image_glyph_set(color_mode, columns)
        glyphs = {state: Glyph(seq, columns) for state, seq in image_glyphs.items()}
    else:
        glyphs = {
            state: _resolve_text_glyph(options, profile, state, symbol_width)
            for state in BarState
        }

    config = ResolvedTerminalConfig(
        profile=profile,
        draw_prefix=traits.draw_prefix,
        symbol_width=symbol_width,
        hide_cursor_supported=traits.hide_cursor,
        glyph_style=glyph_style,
        color_mode=color_mode,
        image_glyphs=image_glyphs,
        glyphs=glyphs,
    )
    logger.debug(
        "Resolved terminal profile=%s style=%s width=%s color=%s",
        profile,
        glyph_style,
        symbol_width,
        color_mode,
    )
    return config


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class MonitorTerminal:
    """Thin wrapper around the output stream the status line is drawn on."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    @property
    def columns(self) -> int | None:
        """Live terminal width, or ``None`` when the stream is not a terminal."""
        try:
            return os.get_terminal_size(self._stream.fileno()).columns
        except (ValueError, OSError):
            return None

    @property
    def is_interactive(self) -> bool:
        try:
            return self._stream.isatty()
        except (ValueError, OSError):
            return False

    def write(self, data: str) -> None:
        self._stream.write(data)
        self._stream.flush()

    def hide_cursor(self) -> None:
        self.write(HIDE_CURSOR)

    def show_cursor(self) -> None:
        self.write(SHOW_CURSOR)

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN)
