"""Virtual terminal for testing -- implements the TerminalSurface protocol in-memory.

This module provides a ``VirtualTerminal`` class that satisfies the
``pi.screen.terminal.TerminalSurface`` protocol without performing any real
I/O. Output lands in a character grid that tests can inspect; registered
color pairs, attribute changes and alternate-screen state are recorded,
and bytes can be queued for the cursor position query.
"""

from __future__ import annotations

from collections import deque
from typing import Callable

from pi.screen.colors import TextAttr
from pi.screen.width import iter_glyphs


class VirtualTerminal:
    """In-memory terminal that records all writes for test inspection.

    Parameters
    ----------
    rows:
        Number of terminal rows (height).
    columns:
        Number of terminal columns (width).
    colors:
        Number of colors the terminal claims to support.
    color_pairs:
        Number of color pairs available.
    """

    def __init__(
        self,
        rows: int = 24,
        columns: int = 80,
        colors: int = 256,
        color_pairs: int = 256,
    ) -> None:
        self._rows = rows
        self._columns = columns
        self._colors = colors
        self._color_pairs = color_pairs
        self._grid = self._blank_grid()
        self._y = 0
        self._x = 0
        self._started = False
        self._resize_handler: Callable[[], None] | None = None
        self._input: deque[bytes] = deque()
        self.raw_output: list[str] = []
        self.pairs: dict[int, tuple[int, int]] = {}
        self.default_colors: tuple[int, int] | None = None
        self.used_default_colors = False
        self.attr_log: list[tuple[str, TextAttr | None]] = []
        self.in_alt_screen = False
        self.alt_screen_entered = 0
        self.scrolled = 0

    # -- TerminalSurface protocol: properties -------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def colors(self) -> int:
        return self._colors

    @property
    def color_pairs(self) -> int:
        return self._color_pairs

    @property
    def started(self) -> bool:
        return self._started

    # -- TerminalSurface protocol: lifecycle --------------------------------

    def start(self, on_resize: Callable[[], None] | None = None) -> None:
        self._resize_handler = on_resize
        self._started = True

    def stop(self) -> None:
        self._started = False
        self._resize_handler = None

    # -- TerminalSurface protocol: input ------------------------------------

    def read_byte(self, timeout: float | None) -> bytes:
        """Pop the next queued byte; an empty queue behaves like a timeout."""
        if not self._input:
            return b""
        return self._input.popleft()

    # -- TerminalSurface protocol: output -----------------------------------

    def move_to(self, y: int, x: int) -> None:
        self._y = y
        self._x = x

    def get_cursor(self) -> tuple[int, int]:
        return self._y, self._x

    def write(self, text: str) -> None:
        """Place *text* in the grid at the cursor, wrapping and scrolling.

        Like a real terminal, filling the last column leaves the cursor
        there until the next glyph forces the wrap.
        """
        for i, line in enumerate(text.split("\n")):
            if i:
                self._line_feed()
            for glyph, width in iter_glyphs(line):
                if width == 0:
                    continue
                if self._x + width > self._columns:
                    self._x = 0
                    self._line_feed()
                self._grid[self._y][self._x] = glyph
                for extra in range(1, width):
                    self._grid[self._y][self._x + extra] = ""
                self._x += width

    def write_raw(self, data: str) -> None:
        self.raw_output.append(data)

    def refresh(self) -> None:
        pass

    def clear_line(self) -> None:
        self._grid[self._y] = [" "] * self._columns

    def enter_alternate_screen(self) -> None:
        self.in_alt_screen = True
        self.alt_screen_entered += 1

    def exit_alternate_screen(self) -> None:
        self.in_alt_screen = False

    # -- TerminalSurface protocol: colors / attributes ----------------------

    def init_pair(self, pair: int, fg: int, bg: int) -> None:
        self.pairs[pair] = (fg, bg)

    def use_default_colors(self) -> None:
        self.used_default_colors = True

    def set_default_colors(self, fg: int, bg: int) -> None:
        self.default_colors = (fg, bg)

    def attr_on(self, attr: TextAttr) -> None:
        self.attr_log.append(("on", attr))

    def attr_off(self, attr: TextAttr) -> None:
        self.attr_log.append(("off", attr))

    def attr_reset(self) -> None:
        self.attr_log.append(("reset", None))

    # -- Test helpers -------------------------------------------------------

    def queue_input(self, data: bytes) -> None:
        """Queue *data* to be returned byte by byte from ``read_byte``."""
        self._input.extend(data[i : i + 1] for i in range(len(data)))

    def line(self, row: int) -> str:
        """Return the text of grid row *row*."""
        return "".join(self._grid[row])

    def lines(self) -> list[str]:
        return [self.line(row) for row in range(self._rows)]

    def fill(self, char: str) -> None:
        """Cover the whole grid with *char*."""
        self._grid = [[char] * self._columns for _ in range(self._rows)]

    def simulate_resize(self, rows: int | None = None, columns: int | None = None) -> None:
        """Change terminal dimensions and fire the resize callback.

        If *rows* or *columns* is ``None`` the corresponding dimension
        is left unchanged.
        """
        if rows is not None:
            self._rows = rows
        if columns is not None:
            self._columns = columns
        self._grid = self._blank_grid()
        self._y = min(self._y, self._rows - 1)
        self._x = min(self._x, self._columns - 1)
        if self._resize_handler is not None:
            self._resize_handler()

    # -- private -------------------------------------------------------------

    def _blank_grid(self) -> list[list[str]]:
        return [[" "] * self._columns for _ in range(self._rows)]

    def _line_feed(self) -> None:
        if self._y < self._rows - 1:
            self._y += 1
            return
        self._grid.pop(0)
        self._grid.append([" "] * self._columns)
        self.scrolled += 1
