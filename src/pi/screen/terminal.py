"""Terminal surface for absolute-position drawing.

Provides a ``TerminalSurface`` protocol and a concrete ``ProcessTerminal``
implementation that manages raw mode, the alternate screen buffer, cursor
movement, color pairs and text attributes via ANSI escape sequences. The
viewport only ever talks to the protocol, so tests substitute an in-memory
surface.
"""

from __future__ import annotations

import locale
import logging
import os
import select
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from pi.screen.colors import Style, TextAttr
from pi.screen.theme import COLOR_DEFAULT
from pi.screen.width import text_width

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"

_CLEAR_LINE = "\x1b[2K"
_MOVE_TO_FMT = "\x1b[{};{}H"
_SGR_FMT = "\x1b[{}m"
_SGR_RESET = "\x1b[0m"

_STYLE_SGR = (
    (Style.BOLD, "1"),
    (Style.UNDERLINE, "4"),
    (Style.REVERSE, "7"),
)


# ---------------------------------------------------------------------------
# TerminalSurface protocol
# ---------------------------------------------------------------------------


class TerminalSurface(Protocol):
    """Capabilities the viewport and color palette draw through.

    Coordinates are absolute and 0-based. Every call takes effect
    immediately and synchronously.
    """

    @property
    def rows(self) -> int: ...

    @property
    def columns(self) -> int: ...

    @property
    def colors(self) -> int: ...

    @property
    def color_pairs(self) -> int: ...

    def start(self, on_resize: Callable[[], None] | None = None) -> None: ...

    def stop(self) -> None: ...

    def move_to(self, y: int, x: int) -> None: ...

    def get_cursor(self) -> tuple[int, int]: ...

    def read_byte(self, timeout: float | None) -> bytes: ...

    def write(self, text: str) -> None: ...

    def write_raw(self, data: str) -> None: ...

    def attr_on(self, attr: TextAttr) -> None: ...

    def attr_off(self, attr: TextAttr) -> None: ...

    def attr_reset(self) -> None: ...

    def init_pair(self, pair: int, fg: int, bg: int) -> None: ...

    def use_default_colors(self) -> None: ...

    def set_default_colors(self, fg: int, bg: int) -> None: ...

    def clear_line(self) -> None: ...

    def enter_alternate_screen(self) -> None: ...

    def exit_alternate_screen(self) -> None: ...

    def refresh(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete surface backed by ``sys.stdin``/``sys.stdout``.

    Manages raw mode via :mod:`tty` and :mod:`termios` and SIGWINCH-based
    resize detection. The cursor position is tracked locally from the
    moves and writes issued, measuring glyphs by display width.
    """

    def __init__(self) -> None:
        self._resize_handler: Callable[[], None] | None = None
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None
        self._write_log_path: str = os.environ.get("PI_SCREEN_WRITE_LOG", "")
        self._y = 0
        self._x = 0
        self._pairs: dict[int, tuple[int, int]] = {}
        self._default_colors: tuple[int, int] = (COLOR_DEFAULT, COLOR_DEFAULT)
        self._in_alt_screen = False

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    @property
    def colors(self) -> int:
        return detect_color_count()

    @property
    def color_pairs(self) -> int:
        return 256 if self.colors >= 256 else 64

    # -- start / stop -------------------------------------------------------

    def start(self, on_resize: Callable[[], None] | None = None) -> None:
        """Enable raw mode and start watching for resizes."""
        self._resize_handler = on_resize

        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)

        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

    def stop(self) -> None:
        """Restore terminal state and clean up all handlers."""
        self._raw_write(_SGR_RESET)

        if self._in_alt_screen:
            self.exit_alternate_screen()

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        fd = sys.stdin.fileno()
        if self._original_termios is not None:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

        self._resize_handler = None

    # -- input --------------------------------------------------------------

    def read_byte(self, timeout: float | None) -> bytes:
        """Read one byte from stdin, or ``b""`` on timeout or end of input."""
        fd = sys.stdin.fileno()
        try:
            readable, _, _ = select.select([fd], [], [], timeout)
        except (OSError, ValueError):
            return b""
        if not readable:
            return b""
        try:
            return os.read(fd, 1)
        except OSError:
            return b""

    # -- output -------------------------------------------------------------

    def write(self, text: str) -> None:
        """Write *text* at the cursor and advance the tracked position.

        In raw mode a line feed moves straight down, scrolling at the
        bottom row.
        """
        self._raw_write(text)
        for i, line in enumerate(text.split("\n")):
            if i:
                self._y = min(self._y + 1, self.rows - 1)
            self._advance(text_width(line))

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(text)
            except OSError:
                pass

    def write_raw(self, data: str) -> None:
        """Send an escape sequence; the tracked cursor does not move."""
        self._raw_write(data)

    def refresh(self) -> None:
        try:
            sys.stdout.flush()
        except OSError:
            pass

    # -- cursor / screen manipulation --------------------------------------

    def move_to(self, y: int, x: int) -> None:
        self._raw_write(_MOVE_TO_FMT.format(y + 1, x + 1))
        self._y = y
        self._x = x

    def get_cursor(self) -> tuple[int, int]:
        return self._y, self._x

    def clear_line(self) -> None:
        self._raw_write(_CLEAR_LINE)

    def enter_alternate_screen(self) -> None:
        self._raw_write(_ALT_SCREEN_ENABLE)
        self._in_alt_screen = True

    def exit_alternate_screen(self) -> None:
        self._raw_write(_ALT_SCREEN_DISABLE)
        self._in_alt_screen = False

    # -- colors / attributes -----------------------------------------------

    def init_pair(self, pair: int, fg: int, bg: int) -> None:
        self._pairs[pair] = (fg, bg)

    def use_default_colors(self) -> None:
        self._default_colors = (COLOR_DEFAULT, COLOR_DEFAULT)

    def set_default_colors(self, fg: int, bg: int) -> None:
        self._default_colors = (fg, bg)

    def attr_on(self, attr: TextAttr) -> None:
        self._raw_write(self._sgr(attr))

    def attr_off(self, attr: TextAttr) -> None:
        self.attr_reset()

    def attr_reset(self) -> None:
        self._raw_write(_SGR_RESET + self._sgr(TextAttr()))

    def _sgr(self, attr: TextAttr) -> str:
        fg, bg = self._pairs.get(attr.pair, self._default_colors)
        params = [code for flag, code in _STYLE_SGR if attr.style & flag]
        params.append(_sgr_color(fg, foreground=True))
        params.append(_sgr_color(bg, foreground=False))
        return _SGR_FMT.format(";".join(params))

    # -- private -----------------------------------------------------------

    def _advance(self, width: int) -> None:
        columns = self.columns
        self._x += width
        while self._x > columns:
            self._x -= columns
            self._y = min(self._y + 1, self.rows - 1)

    def _on_sigwinch(
        self,
        signum: int,
        frame: object,
    ) -> None:
        """Handle terminal resize signals."""
        if self._resize_handler is not None:
            self._resize_handler()

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sgr_color(color: int, *, foreground: bool) -> str:
    """SGR parameter selecting *color* as foreground or background."""
    if color < 0:
        return "39" if foreground else "49"
    if color < 8:
        return str((30 if foreground else 40) + color)
    if color < 16:
        return str((90 if foreground else 100) + color - 8)
    return f"{38 if foreground else 48};5;{color}"


def detect_color_count() -> int:
    """Best-effort number of colors the terminal supports, from the env."""
    term = os.environ.get("TERM", "").lower()
    color_term = os.environ.get("COLORTERM", "").lower()

    if color_term in ("truecolor", "24bit") or "256color" in term:
        return 256
    if not term or term == "dumb":
        return 0
    return 8


def ensure_wide_locale() -> str:
    """Activate a UTF-8 locale so wide glyphs are emitted correctly.

    Returns the encoding in effect afterwards.
    """
    for name in ("", "C.UTF-8", "en_US.UTF-8"):
        try:
            locale.setlocale(locale.LC_ALL, name)
        except locale.Error:
            continue
        encoding = locale.getpreferredencoding(False)
        if encoding.lower().replace("-", "") == "utf8":
            return encoding
    encoding = locale.getpreferredencoding(False)
    logger.warning("terminal: no UTF-8 locale available, using %s", encoding)
    return encoding
