"""Display-width measurement for text written to the terminal.

The viewport tracks the hardware cursor itself, so every glyph written must
be measured the way the terminal will lay it out: wide CJK characters and
emoji occupy two cells, combining marks and control characters none.
"""

from __future__ import annotations

import unicodedata
from typing import Iterator

import grapheme
import wcwidth as _wcwidth

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
# Glyph width
# ---------------------------------------------------------------------------


def glyph_width(g: str) -> int:
    """Return the number of terminal cells a single grapheme cluster uses.

    Rules:
    1. Control characters, combining marks and format characters -> 0
    2. Emoji sequences (VS16, ZWJ, skin tones, flags) -> 2
    3. Otherwise delegate to wcwidth for the first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # Skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # Regional indicators
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def iter_glyphs(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(grapheme, width)`` for every grapheme cluster in *text*."""
    for g in grapheme.graphemes(text):
        yield g, glyph_width(g)


# ---------------------------------------------------------------------------
# text_width
# ---------------------------------------------------------------------------


def text_width(text: str) -> int:
    """Calculate the number of terminal cells *text* occupies.

    Uses a fast path for printable ASCII and caches results for everything
    else.
    """
    if not text:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in text):
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = sum(width for _, width in iter_glyphs(text))
    return _cache_width(text, total)
