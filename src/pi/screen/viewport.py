"""Viewport: a bounded, resizable drawing region inside the terminal.

::

    |
    +------------+ start_row
    |  ^         |
    | <          | <-- top = start_row + margin_top
    |  (margins) |
    |           >| <-- bottom = start_row + height - margin_bottom
    |          v |
    +------------+ start_row + height
    |

A full-height viewport lives on the alternate screen. A partial-height
viewport is an inline panel: lines are reserved below the shell prompt by
scrolling the normal screen, so earlier output stays in the scrollback
above it.

Callers draw in logical coordinates relative to ``(top, left)``; the
viewport translates them to absolute terminal positions.
"""

from __future__ import annotations

import logging
import re

from pi.screen.colors import ColorPalette, TextAttr
from pi.screen.config import ScreenConfig
from pi.screen.margin import FULL, NO_MARGINS, Margin, Margins
from pi.screen.terminal import (
    ProcessTerminal,
    TerminalSurface,
    ensure_wide_locale,
)

logger = logging.getLogger(__name__)

_CURSOR_QUERY = "\x1b[6n"
_CURSOR_RESPONSE_RE = re.compile(r"\x1b\[(\d+);(\d+)R")
_CURSOR_RESPONSE_END = b"R"
_CURSOR_RESPONSE_MAX = 32

# Line feeds, not blanks: blanks written at the bottom row would not make
# the terminal scroll the reserved rows into view.
_RESERVE_FEED = "\n"


class TerminalQueryError(RuntimeError):
    """The terminal did not answer a query with a well-formed response."""


def query_cursor_position(
    surface: TerminalSurface, timeout: float | None = 1.0
) -> tuple[int, int]:
    """Ask the terminal where the cursor is, as 0-based ``(row, col)``.

    Blocks until the ``R`` terminating the response arrives. *timeout*
    bounds the wait for each byte; ``None`` waits forever.

    Raises :class:`TerminalQueryError` on timeout, end of input, or a
    malformed response.
    """
    surface.write_raw(_CURSOR_QUERY)
    surface.refresh()

    response = bytearray()
    while True:
        byte = surface.read_byte(timeout)
        if not byte:
            raise TerminalQueryError(
                f"no cursor position response (got {bytes(response)!r})"
            )
        response += byte
        if byte == _CURSOR_RESPONSE_END:
            break
        if len(response) > _CURSOR_RESPONSE_MAX:
            raise TerminalQueryError(
                f"cursor position response too long: {bytes(response)!r}"
            )

    text = response.decode("ascii", errors="replace")
    match = _CURSOR_RESPONSE_RE.search(text)
    if match is None:
        raise TerminalQueryError(f"malformed cursor position response: {text!r}")
    return int(match.group(1)) - 1, int(match.group(2)) - 1


class Viewport:
    """Geometry and drawing primitives for the active screen region."""

    def __init__(
        self,
        surface: TerminalSurface,
        palette: ColorPalette,
        *,
        margins: Margins = NO_MARGINS,
        height: Margin = FULL,
        cursor_query_timeout: float | None = 1.0,
    ) -> None:
        self._surface = surface
        self._palette = palette
        self.margins = margins
        self.height = height
        self._cursor_query_timeout = cursor_query_timeout

        self.top = 0
        self.bottom = 0
        self.left = 0
        self.right = 0
        self.start_row = 0
        self._alt_screen = False
        self._opened = False

    @classmethod
    def from_config(
        cls,
        surface: TerminalSurface,
        config: ScreenConfig,
        palette: ColorPalette | None = None,
    ) -> Viewport:
        """Create a viewport (and palette, unless given) from *config*."""
        if palette is None:
            palette = ColorPalette()
        return cls(
            surface,
            palette,
            margins=config.margins(),
            height=config.height_margin(),
            cursor_query_timeout=config.cursor_query_timeout,
        )

    @property
    def palette(self) -> ColorPalette:
        return self._palette

    @property
    def is_full_screen(self) -> bool:
        return self.height.is_full

    # -- lifecycle ----------------------------------------------------------

    def open(self) -> Viewport:
        """Take over the terminal and compute the initial rectangle."""
        ensure_wide_locale()
        self._surface.start(self.resize)
        try:
            self._setup()
        except BaseException:
            self._release()
            raise
        self._opened = True
        return self

    def _setup(self) -> None:
        if self.is_full_screen:
            self._enter_full_screen()
        else:
            try:
                cursor_row, cursor_col = query_cursor_position(
                    self._surface, self._cursor_query_timeout
                )
            except TerminalQueryError as exc:
                logger.warning(
                    "viewport: %s; falling back to full screen", exc
                )
                self.height = FULL
                self._enter_full_screen()
            else:
                max_rows = self._surface.rows
                self._surface.move_to(cursor_row, cursor_col)
                rows = self._reserve_lines(max_rows)
                self.start_row = max(0, min(cursor_row, max_rows - rows))

        logger.debug(
            "viewport: height = %s, max: %d/%d, start_row: %d",
            self.height,
            self._surface.rows,
            self._surface.columns,
            self.start_row,
        )
        self.resize()

    def close(self) -> None:
        """Erase the viewport and hand the terminal back."""
        if not self._opened:
            return
        logger.debug("viewport: close")
        self._opened = False
        try:
            self.erase()
            self.move(0, 0)
            self._surface.refresh()
        finally:
            self._release()

    def __enter__(self) -> Viewport:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _enter_full_screen(self) -> None:
        self._surface.enter_alternate_screen()
        self._alt_screen = True
        self.start_row = 0

    def _release(self) -> None:
        """Leave the alternate screen and stop the surface, whatever fails."""
        try:
            if self._alt_screen:
                self._alt_screen = False
                self._surface.exit_alternate_screen()
        finally:
            self._surface.stop()

    def _reserve_lines(self, max_rows: int) -> int:
        """Scroll the screen so *height* rows are free from the cursor down.

        Returns the number of rows reserved.
        """
        rows = max(1, min(max_rows, self.height.resolve(max_rows)))
        logger.debug("viewport: reserve_lines: max_rows %d, rows %d", max_rows, rows)

        self._surface.write(_RESERVE_FEED * (rows - 1))
        self._surface.refresh()
        return rows

    # -- geometry -----------------------------------------------------------

    def height_in_rows(self) -> int:
        max_rows = self._surface.rows
        if self.is_full_screen:
            return max_rows
        return max(0, min(max_rows, self.height.resolve(max_rows)))

    def resize(self) -> None:
        """Recompute the rectangle from the margins and terminal size."""
        max_rows = self._surface.rows
        max_cols = self._surface.columns
        height = self.height_in_rows()
        start = max(0, min(self.start_row, max_rows - height))
        end = start + height

        top = start + self.margins.top.resolve(height)
        bottom = end - self.margins.bottom.resolve(height)
        left = self.margins.left.resolve(max_cols)
        right = max_cols - self.margins.right.resolve(max_cols)

        self.top = _clamp(top, start, end)
        self.bottom = _clamp(bottom, self.top, end)
        self.left = _clamp(left, 0, max_cols)
        self.right = _clamp(right, self.left, max_cols)

        logger.debug(
            "viewport: resize: trbl: %d, %d, %d, %d",
            self.top,
            self.right,
            self.bottom,
            self.left,
        )

    def get_max_size(self) -> tuple[int, int]:
        """Logical ``(rows, cols)`` available for drawing."""
        return self.bottom - self.top, self.right - self.left

    # -- cursor -------------------------------------------------------------

    def move(self, y: int, x: int) -> None:
        """Move the cursor to logical position ``(y, x)``."""
        self._surface.move_to(y + self.top, x + self.left)

    def get_cursor(self) -> tuple[int, int]:
        """Current cursor position in logical coordinates."""
        y, x = self._surface.get_cursor()
        return y - self.top, x - self.left

    # -- erasing ------------------------------------------------------------

    def clear_to_eol(self) -> None:
        """Blank the current row from the cursor to the viewport's right edge.

        Content outside the viewport on the same terminal row is kept.
        """
        y, x = self._surface.get_cursor()
        start = max(x, self.left)
        if start < self.right:
            self._surface.move_to(y, start)
            self._surface.write(" " * (self.right - start))
        self._surface.move_to(y, x)

    def erase(self) -> None:
        """Blank every cell of the viewport, leaving the cursor in place."""
        logger.debug("viewport: erase: top %d, bottom %d", self.top, self.bottom)
        y, x = self._surface.get_cursor()
        spaces = " " * (self.right - self.left)
        if spaces:
            for row in range(self.top, self.bottom):
                self._surface.move_to(row, self.left)
                self._surface.write(spaces)
        self._surface.move_to(y, x)

    # -- drawing ------------------------------------------------------------

    def cprint(self, text: str, pair: int, is_bold: bool = False) -> None:
        """Write *text* in color *pair* at the cursor."""
        attr = self._palette.attr_for(pair, is_bold)
        self._surface.attr_on(attr)
        self._surface.write(text)
        self._surface.attr_off(attr)

    def caddch(self, ch: str, pair: int, is_bold: bool = False) -> None:
        """Write a single (possibly wide) glyph in color *pair*."""
        self.cprint(ch, pair, is_bold)

    def printw(self, text: str) -> None:
        """Write *text* with whatever attribute is currently active."""
        self._surface.write(text)

    def attr_on(self, attr: TextAttr) -> None:
        """Turn *attr* on; an empty attribute resets all attributes."""
        if attr:
            self._surface.attr_on(attr)
        else:
            self._surface.attr_reset()

    def refresh(self) -> None:
        self._surface.refresh()


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def open_screen(
    config: ScreenConfig | None = None,
    surface: TerminalSurface | None = None,
) -> Viewport:
    """Resolve colors and open a viewport as described by *config*.

    Defaults to a :class:`~pi.screen.terminal.ProcessTerminal` and the
    environment-derived configuration.
    """
    if config is None:
        config = ScreenConfig.from_env()
    if surface is None:
        surface = ProcessTerminal()

    palette = ColorPalette()
    palette.install(surface, config.theme(), black=config.black)
    return Viewport.from_config(surface, config, palette).open()
