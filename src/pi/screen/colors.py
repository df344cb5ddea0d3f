"""Color-pair allocation and text attributes.

A :class:`ColorPalette` is the single owner of color state for a screen:
the active default foreground/background, whether color is enabled at all,
and the cache of dynamically allocated ``(fg, bg)`` pairs. It is created
once at startup and handed to every component that draws, so preview
workers on other threads can format colored output too. All state is
guarded by one lock.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pi.screen.theme import (
    COLOR_BLACK,
    COLOR_DEFAULT,
    ColorTheme,
    base_theme_for,
)

if TYPE_CHECKING:
    from pi.screen.terminal import TerminalSurface

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Reserved pair indices for the fixed semantic roles
# ---------------------------------------------------------------------------

COLOR_NORMAL = 0
COLOR_PROMPT = 1
COLOR_MATCHED = 2
COLOR_CURRENT = 3
COLOR_CURRENT_MATCH = 4
COLOR_SPINNER = 5
COLOR_INFO = 6
COLOR_CURSOR = 7
COLOR_SELECTED = 8
COLOR_HEADER = 9

# First index handed out by :meth:`ColorPalette.get_pair`.
COLOR_USER = 10


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


class Style(enum.IntFlag):
    NONE = 0
    BOLD = enum.auto()
    UNDERLINE = enum.auto()
    REVERSE = enum.auto()


@dataclass(frozen=True)
class TextAttr:
    """A color pair index combined with text style flags.

    Pair ``0`` means the default colors.
    """

    pair: int = COLOR_NORMAL
    style: Style = Style.NONE

    def __bool__(self) -> bool:
        return self.pair != COLOR_NORMAL or self.style != Style.NONE


PLAIN = TextAttr()


def attr_color(pair: int, is_bold: bool) -> TextAttr:
    """Attribute for *pair* when the terminal renders colors."""
    return TextAttr(
        pair=pair if pair > COLOR_NORMAL else COLOR_NORMAL,
        style=Style.BOLD if is_bold else Style.NONE,
    )


def attr_mono(pair: int, is_bold: bool) -> TextAttr:
    """Attribute for *pair* on a terminal without color.

    The semantic roles that must stay distinguishable are mapped onto
    reverse video and underline.
    """
    style = Style.NONE
    if pair == COLOR_NORMAL:
        if is_bold:
            style = Style.REVERSE
    elif pair == COLOR_MATCHED:
        style = Style.UNDERLINE
    elif pair == COLOR_CURRENT_MATCH:
        style = Style.UNDERLINE | Style.REVERSE
    if is_bold:
        style |= Style.BOLD
    return TextAttr(pair=COLOR_NORMAL, style=style)


# ---------------------------------------------------------------------------
# ColorPalette
# ---------------------------------------------------------------------------


class ColorPalette:
    """Resolved default colors plus the process-lifetime pair cache.

    Until :meth:`install` is called the palette renders in monochrome.
    :meth:`get_pair` hands out distinct handles in every mode; they are
    registered with the terminal only while a color surface is installed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._surface: TerminalSurface | None = None
        self._fg: int = 7
        self._bg: int = COLOR_BLACK
        self._use_color: bool = False
        self._pairs: dict[tuple[int, int], int] = {}
        self._max_pairs: int = 0
        self._exhausted_logged = False

    # -- properties ---------------------------------------------------------

    @property
    def use_color(self) -> bool:
        with self._lock:
            return self._use_color

    @property
    def default_colors(self) -> tuple[int, int]:
        with self._lock:
            return self._fg, self._bg

    @property
    def allocated(self) -> int:
        """Number of dynamically allocated pairs."""
        with self._lock:
            return len(self._pairs)

    # -- setup --------------------------------------------------------------

    def install(
        self,
        surface: TerminalSurface,
        theme: ColorTheme | None,
        *,
        black: bool = False,
    ) -> None:
        """Resolve *theme* against the terminal's base palette and register
        the reserved role pairs.

        ``theme=None``, or a terminal with fewer than 8 colors, switches the
        palette to monochrome rendering.
        """
        if theme is None or surface.colors < 8:
            with self._lock:
                self._surface = None
                self._use_color = False
                self._max_pairs = 0
            logger.debug("colors: monochrome")
            return

        base = base_theme_for(surface.colors)
        resolved = base.shadowed_by(theme)

        fg = resolved.fg
        bg = resolved.bg
        if black:
            bg = COLOR_BLACK
        elif theme.use_default:
            fg = COLOR_DEFAULT
            bg = COLOR_DEFAULT
            surface.use_default_colors()

        if not theme.use_default:
            surface.set_default_colors(resolved.fg, resolved.bg)

        with self._lock:
            self._surface = surface
            self._fg = fg
            self._bg = bg
            self._use_color = True
            self._max_pairs = surface.color_pairs
            _register_role_pairs(surface, resolved, bg)
            # Handles given out while monochrome now need real pairs.
            for (pair_fg, pair_bg), pair in self._pairs.items():
                if COLOR_USER <= pair < self._max_pairs:
                    surface.init_pair(pair, pair_fg, pair_bg)

        logger.debug(
            "colors: colors=%d, fg/bg=%d/%d, max pairs=%d",
            surface.colors,
            fg,
            bg,
            self._max_pairs,
        )

    def disable(self) -> None:
        """Switch to monochrome rendering."""
        with self._lock:
            self._use_color = False

    # -- pairs --------------------------------------------------------------

    def get_pair(self, fg: int, bg: int) -> int:
        """Return the pair index for *fg* on *bg*, allocating it on first use.

        ``COLOR_DEFAULT`` stands for the active default color. Without a
        color surface the handle is only cached. Once the terminal's pair
        capacity is used up, new combinations render with the default
        colors.
        """
        with self._lock:
            if fg == COLOR_DEFAULT:
                fg = self._fg
            if bg == COLOR_DEFAULT:
                bg = self._bg

            key = (fg, bg)
            pair = self._pairs.get(key)
            if pair is not None:
                return pair

            pair = COLOR_USER + len(self._pairs)
            if self._surface is not None:
                if pair < self._max_pairs:
                    self._surface.init_pair(pair, fg, bg)
                else:
                    if not self._exhausted_logged:
                        logger.warning(
                            "colors: no free color pair for %d/%d, using defaults",
                            fg,
                            bg,
                        )
                        self._exhausted_logged = True
                    pair = COLOR_NORMAL

            self._pairs[key] = pair
            return pair

    def attr_for(self, pair: int, is_bold: bool) -> TextAttr:
        """Attribute to render *pair*, honoring the monochrome fallback."""
        if self.use_color:
            return attr_color(pair, is_bold)
        return attr_mono(pair, is_bold)


def _register_role_pairs(
    surface: TerminalSurface, theme: ColorTheme, bg: int
) -> None:
    surface.init_pair(COLOR_PROMPT, theme.prompt, bg)
    surface.init_pair(COLOR_MATCHED, theme.matched, theme.matched_bg)
    surface.init_pair(COLOR_CURRENT, theme.current, theme.current_bg)
    surface.init_pair(
        COLOR_CURRENT_MATCH, theme.current_match, theme.current_match_bg
    )
    surface.init_pair(COLOR_SPINNER, theme.spinner, bg)
    surface.init_pair(COLOR_INFO, theme.info, bg)
    surface.init_pair(COLOR_CURSOR, theme.cursor, theme.current_bg)
    surface.init_pair(COLOR_SELECTED, theme.selected, theme.current_bg)
    surface.init_pair(COLOR_HEADER, theme.header, theme.bg)
