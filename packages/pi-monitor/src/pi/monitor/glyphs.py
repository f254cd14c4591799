"""Image glyphs for terminals that support inline images.

Each bar state has a small RGBA sprite that is encoded to PNG in memory and
wrapped in an iTerm2 inline-image escape sequence. Warn and critical sprites
have dark and light variants so the indicator stays legible on either
background.
"""

from __future__ import annotations

import base64
import struct
import zlib
from functools import lru_cache

from pi.monitor.types import BarState, ColorMode

Rgba = tuple[int, int, int, int]

# ---------------------------------------------------------------------------
# Sprites (16x16, "." is transparent)
# ---------------------------------------------------------------------------

_LOBSTER = (
    "..r..........r..",
    ".r.r........r.r.",
    ".rr..........rr.",
    "..rr........rr..",
    "...rr..rr..rr...",
    "....rrrrrrrr....",
    ".....rwrrwr.....",
    "......rrrr......",
    ".....rrddrr.....",
    "....r.rrrr.r....",
    "......rddr......",
    "....r.rrrr.r....",
    "......rddr......",
    ".......rr.......",
    "......rrrr......",
    ".....rr..rr.....",
)

_BLOCK = (
    "................",
    "................",
    "..bbbbbbbbbbbb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bssssssssssb..",
    "..bbbbbbbbbbbb..",
    "................",
    "................",
)

_TRANSPARENT: Rgba = (0, 0, 0, 0)
_WHITE: Rgba = (0xFF, 0xFF, 0xFF, 0xFF)

_OK_PALETTE: dict[str, Rgba] = {
    "r": (0xD9, 0x2B, 0x1F, 0xFF),
    "d": (0x8B, 0x1A, 0x12, 0xFF),
    "w": _WHITE,
}

_WARN_PALETTES: dict[str, dict[str, Rgba]] = {
    "dark": {
        "r": (0xF5, 0xC5, 0x18, 0xFF),
        "d": (0xB8, 0x8A, 0x00, 0xFF),
        "w": _WHITE,
    },
    "light": {
        "r": (0xC2, 0x6A, 0x00, 0xFF),
        "d": (0x7A, 0x40, 0x00, 0xFF),
        "w": _WHITE,
    },
}

_CRITICAL_PALETTES: dict[str, dict[str, Rgba]] = {
    "dark": {
        "s": (0xF2, 0xF2, 0xF2, 0xFF),
        "b": (0xBF, 0xBF, 0xBF, 0xFF),
    },
    "light": {
        "s": (0x26, 0x26, 0x26, 0xFF),
        "b": (0x0D, 0x0D, 0x0D, 0xFF),
    },
}


# ---------------------------------------------------------------------------
# PNG encoding
# ---------------------------------------------------------------------------

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _png_chunk(tag: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(tag + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)


def encode_png(rows: tuple[str, ...], palette: dict[str, Rgba]) -> bytes:
    """Encode a character-grid sprite as an 8-bit RGBA PNG."""
    if not rows:
        raise ValueError("sprite has no rows")
    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise ValueError("sprite rows must all have the same width")

    raw = bytearray()
    for row in rows:
        raw.append(0)  # filter type: none
        for ch in row:
            raw.extend(palette.get(ch, _TRANSPARENT))

    ihdr = struct.pack(">IIBBBBB", width, len(rows), 8, 6, 0, 0, 0)
    return (
        _PNG_SIGNATURE
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(bytes(raw), 9))
        + _png_chunk(b"IEND", b"")
    )


# ---------------------------------------------------------------------------
# iTerm2 inline images
# ---------------------------------------------------------------------------

ITERM2_PREFIX = "\x1b]1337;File="


def encode_iterm2(
    base64_data: str,
    *,
    width: int | str | None = None,
    height: int | str | None = None,
    preserve_aspect_ratio: bool | None = None,
    inline: bool = True,
) -> str:
    params: list[str] = [f"inline={1 if inline else 0}"]

    if width is not None:
        params.append(f"width={width}")
    if height is not None:
        params.append(f"height={height}")
    if preserve_aspect_ratio is False:
        params.append("preserveAspectRatio=0")

    return f"{ITERM2_PREFIX}{';'.join(params)}:{base64_data}\x07"


def _sprite_sequence(rows: tuple[str, ...], palette: dict[str, Rgba], columns: int) -> str:
    data = base64.b64encode(encode_png(rows, palette)).decode("ascii")
    return encode_iterm2(data, width=columns, height=1, preserve_aspect_ratio=False)


@lru_cache(maxsize=8)
def _cached_glyph_set(color_mode: ColorMode, columns: int) -> tuple[str, str, str]:
    return (
        _sprite_sequence(_LOBSTER, _OK_PALETTE, columns),
        _sprite_sequence(_LOBSTER, _WARN_PALETTES[color_mode], columns),
        _sprite_sequence(_BLOCK, _CRITICAL_PALETTES[color_mode], columns),
    )


def image_glyph_set(color_mode: ColorMode, columns: int = 2) -> dict[BarState, str]:
    """Return the per-state inline-image sequences, each *columns* cells wide."""
    ok, warn, critical = _cached_glyph_set(color_mode, columns)
    return {BarState.OK: ok, BarState.WARN: warn, BarState.CRITICAL: critical}
