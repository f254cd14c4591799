"""Terminal column width of Unicode text.

Measures text one code point at a time:

* NUL, C0 and C1 control characters -> 0
* zero-width joiner and variation selectors -> 0
* combining marks -> 0
* Extended_Pictographic (emoji-like) or East-Asian wide/fullwidth -> 2
* everything else -> 1
"""

from __future__ import annotations

import bisect
import unicodedata

import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Extended_Pictographic ranges (Unicode emoji-data), inclusive
# ---------------------------------------------------------------------------

_PICTOGRAPHIC_RANGES: tuple[tuple[int, int], ...] = (
    (0x00A9, 0x00A9),
    (0x00AE, 0x00AE),
    (0x203C, 0x203C),
    (0x2049, 0x2049),
    (0x2122, 0x2122),
    (0x2139, 0x2139),
    (0x2194, 0x2199),
    (0x21A9, 0x21AA),
    (0x231A, 0x231B),
    (0x2328, 0x2328),
    (0x2388, 0x2388),
    (0x23CF, 0x23CF),
    (0x23E9, 0x23F3),
    (0x23F8, 0x23FA),
    (0x24C2, 0x24C2),
    (0x25AA, 0x25AB),
    (0x25B6, 0x25B6),
    (0x25C0, 0x25C0),
    (0x25FB, 0x25FE),
    (0x2600, 0x2605),
    (0x2607, 0x2612),
    (0x2614, 0x2685),
    (0x2690, 0x2705),
    (0x2708, 0x2712),
    (0x2714, 0x2714),
    (0x2716, 0x2716),
    (0x271D, 0x271D),
    (0x2721, 0x2721),
    (0x2728, 0x2728),
    (0x2733, 0x2734),
    (0x2744, 0x2744),
    (0x2747, 0x2747),
    (0x274C, 0x274C),
    (0x274E, 0x274E),
    (0x2753, 0x2755),
    (0x2757, 0x2757),
    (0x2763, 0x2767),
    (0x2795, 0x2797),
    (0x27A1, 0x27A1),
    (0x27B0, 0x27B0),
    (0x27BF, 0x27BF),
    (0x2934, 0x2935),
    (0x2B05, 0x2B07),
    (0x2B1B, 0x2B1C),
    (0x2B50, 0x2B50),
    (0x2B55, 0x2B55),
    (0x3030, 0x3030),
    (0x303D, 0x303D),
    (0x3297, 0x3297),
    (0x3299, 0x3299),
    (0x1F000, 0x1F0FF),
    (0x1F10D, 0x1F10F),
    (0x1F12F, 0x1F12F),
    (0x1F16C, 0x1F171),
    (0x1F17E, 0x1F17F),
    (0x1F18E, 0x1F18E),
    (0x1F191, 0x1F19A),
    (0x1F1AD, 0x1F1E5),
    (0x1F201, 0x1F20F),
    (0x1F21A, 0x1F21A),
    (0x1F22F, 0x1F22F),
    (0x1F232, 0x1F23A),
    (0x1F23C, 0x1F23F),
    (0x1F249, 0x1F3FA),
    (0x1F400, 0x1F53D),
    (0x1F546, 0x1F64F),
    (0x1F680, 0x1F6FF),
    (0x1F774, 0x1F77F),
    (0x1F7D5, 0x1F7FF),
    (0x1F80C, 0x1F80F),
    (0x1F848, 0x1F84F),
    (0x1F85A, 0x1F85F),
    (0x1F888, 0x1F88F),
    (0x1F8AE, 0x1F8FF),
    (0x1F90C, 0x1F93A),
    (0x1F93C, 0x1F945),
    (0x1F947, 0x1FAFF),
    (0x1FC00, 0x1FFFD),
)

_PICTOGRAPHIC_STARTS: tuple[int, ...] = tuple(start for start, _ in _PICTOGRAPHIC_RANGES)

_ZWJ = 0x200D


def is_extended_pictographic(cp: int) -> bool:
    i = bisect.bisect_right(_PICTOGRAPHIC_STARTS, cp) - 1
    return i >= 0 and cp <= _PICTOGRAPHIC_RANGES[i][1]


def _is_variation_selector(cp: int) -> bool:
    return 0xFE00 <= cp <= 0xFE0F or 0xE0100 <= cp <= 0xE01EF


# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def char_width(ch: str) -> int:
    """Return the terminal width of a single code point."""
    cp = ord(ch)

    # Control characters, NUL included
    if cp < 0x20 or (0x7F <= cp <= 0x9F):
        return 0
    if cp == _ZWJ or _is_variation_selector(cp):
        return 0
    if unicodedata.category(ch).startswith("M"):
        return 0
    if is_extended_pictographic(cp) or _wcwidth.wcwidth(ch) == 2:
        return 2
    return 1


def display_width(text: str) -> int:
    """Calculate the terminal width of *text*, summed per code point."""
    if not text:
        return 0

    # Fast ASCII path: all codepoints in 0x20..0x7E
    if text.isascii() and text.isprintable():
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = 0
    for ch in text:
        total += char_width(ch)
    return _cache_width(text, total)
