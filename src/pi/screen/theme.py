"""Color themes: semantic color roles, preset palettes and the color spec parser.

A theme assigns a terminal color index to each semantic role of the
renderer (plain text, matched text, the current line, the cursor, ...).
Roles left as ``None`` are unset and inherit from a base theme when the
two are combined with :meth:`ColorTheme.shadowed_by`.

User themes are written as a comma-separated list of tokens::

    molokai,matched:108,current_bg:236

A bare token selects a preset and restarts the theme from it; a
``role:value`` token overrides a single role.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from functools import reduce

__all__ = [
    "COLOR_DEFAULT",
    "COLOR_BLACK",
    "COLOR_RED",
    "COLOR_GREEN",
    "COLOR_YELLOW",
    "COLOR_BLUE",
    "COLOR_MAGENTA",
    "COLOR_CYAN",
    "COLOR_WHITE",
    "ROLES",
    "ColorTheme",
    "DEFAULT16",
    "DARK256",
    "MONOKAI256",
    "LIGHT256",
    "shadow",
    "base_theme_for",
    "preset_for",
    "parse_color_spec",
]

# ---------------------------------------------------------------------------
# Color constants
# ---------------------------------------------------------------------------

# The terminal's own default foreground/background.
COLOR_DEFAULT = -1

COLOR_BLACK = 0
COLOR_RED = 1
COLOR_GREEN = 2
COLOR_YELLOW = 3
COLOR_BLUE = 4
COLOR_MAGENTA = 5
COLOR_CYAN = 6
COLOR_WHITE = 7

_MAX_COLOR = 255

_INT_RE = re.compile(r"[+-]?[0-9]+")


# ---------------------------------------------------------------------------
# ColorTheme
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColorTheme:
    """Color index per semantic role; ``None`` means "not set"."""

    use_default: bool = True

    fg: int | None = None
    bg: int | None = None
    matched: int | None = None
    matched_bg: int | None = None
    current: int | None = None
    current_bg: int | None = None
    current_match: int | None = None
    current_match_bg: int | None = None
    spinner: int | None = None
    info: int | None = None
    prompt: int | None = None
    cursor: int | None = None
    selected: int | None = None
    header: int | None = None

    def shadowed_by(self, override: ColorTheme) -> ColorTheme:
        """Return this theme with every role set in *override* replaced."""
        values = {
            role: shadow(getattr(self, role), getattr(override, role))
            for role in ROLES
        }
        return ColorTheme(use_default=override.use_default, **values)

    def with_role(self, role: str, value: int | None) -> ColorTheme:
        """Return a copy with *role* set to *value*; unknown roles are ignored."""
        if role not in ROLES:
            return self
        return replace(self, **{role: value})


ROLES: tuple[str, ...] = tuple(
    f.name for f in fields(ColorTheme) if f.name != "use_default"
)


def shadow(base: int | None, override: int | None) -> int | None:
    """Use *override* unless it is unset, in which case fall back to *base*."""
    return base if override is None else override


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

DEFAULT16 = ColorTheme(
    fg=15,
    bg=0,
    matched=COLOR_GREEN,
    matched_bg=COLOR_BLACK,
    current=COLOR_YELLOW,
    current_bg=COLOR_BLACK,
    current_match=COLOR_GREEN,
    current_match_bg=COLOR_BLACK,
    spinner=COLOR_GREEN,
    info=COLOR_WHITE,
    prompt=COLOR_BLUE,
    cursor=COLOR_RED,
    selected=COLOR_MAGENTA,
    header=COLOR_CYAN,
)

DARK256 = ColorTheme(
    fg=15,
    bg=0,
    matched=108,
    matched_bg=0,
    current=254,
    current_bg=236,
    current_match=151,
    current_match_bg=236,
    spinner=148,
    info=144,
    prompt=110,
    cursor=161,
    selected=168,
    header=109,
)

MONOKAI256 = ColorTheme(
    fg=252,
    bg=234,
    matched=234,
    matched_bg=186,
    current=254,
    current_bg=236,
    current_match=234,
    current_match_bg=186,
    spinner=148,
    info=144,
    prompt=110,
    cursor=161,
    selected=168,
    header=109,
)

LIGHT256 = ColorTheme(
    fg=15,
    bg=0,
    matched=0,
    matched_bg=220,
    current=237,
    current_bg=251,
    current_match=66,
    current_match_bg=251,
    spinner=65,
    info=101,
    prompt=25,
    cursor=161,
    selected=168,
    header=31,
)

_PRESETS: dict[str, ColorTheme] = {
    "molokai": MONOKAI256,
    "light": LIGHT256,
    "16": DEFAULT16,
    "dark": DARK256,
}


def preset_for(name: str) -> ColorTheme:
    """Look up a preset by name; unknown names select the dark preset."""
    return _PRESETS.get(name, DARK256)


def base_theme_for(colors: int) -> ColorTheme:
    """Pick the base palette for a terminal that supports *colors* colors."""
    return DARK256 if colors >= 256 else DEFAULT16


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_color(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    value = int(text)
    if value < COLOR_DEFAULT or value > _MAX_COLOR:
        return None
    return value


def _apply_token(theme: ColorTheme, token: str) -> ColorTheme:
    parts = token.split(":")
    if len(parts) < 2:
        return preset_for(parts[0])
    return theme.with_role(parts[0], _parse_color(parts[1]))


def parse_color_spec(spec: str) -> ColorTheme:
    """Build a theme from a comma-separated color spec.

    Tokens are applied left to right. A preset token replaces everything
    accumulated so far, so ``"fg:1,light"`` is just the light preset while
    ``"light,fg:1"`` is the light preset with ``fg`` overridden.
    """
    return reduce(_apply_token, spec.split(","), ColorTheme())
