"""pi-screen: viewport geometry and color pairs for terminal renderers."""

# Colors
from pi.screen.colors import (
    COLOR_CURRENT,
    COLOR_CURRENT_MATCH,
    COLOR_CURSOR,
    COLOR_HEADER,
    COLOR_INFO,
    COLOR_MATCHED,
    COLOR_NORMAL,
    COLOR_PROMPT,
    COLOR_SELECTED,
    COLOR_SPINNER,
    COLOR_USER,
    ColorPalette,
    Style,
    TextAttr,
    attr_color,
    attr_mono,
)

# Configuration
from pi.screen.config import ScreenConfig

# Margins
from pi.screen.margin import Margin, Margins, parse_height, parse_margin_value, parse_margins

# Terminal surface
from pi.screen.terminal import ProcessTerminal, TerminalSurface, ensure_wide_locale

# Themes
from pi.screen.theme import (
    COLOR_DEFAULT,
    DARK256,
    DEFAULT16,
    LIGHT256,
    MONOKAI256,
    ColorTheme,
    base_theme_for,
    parse_color_spec,
    shadow,
)

# Viewport
from pi.screen.viewport import (
    TerminalQueryError,
    Viewport,
    open_screen,
    query_cursor_position,
)

# Utilities
from pi.screen.width import text_width

__all__ = [
    # Colors
    "COLOR_CURRENT",
    "COLOR_CURRENT_MATCH",
    "COLOR_CURSOR",
    "COLOR_HEADER",
    "COLOR_INFO",
    "COLOR_MATCHED",
    "COLOR_NORMAL",
    "COLOR_PROMPT",
    "COLOR_SELECTED",
    "COLOR_SPINNER",
    "COLOR_USER",
    "ColorPalette",
    "Style",
    "TextAttr",
    "attr_color",
    "attr_mono",
    # Configuration
    "ScreenConfig",
    # Margins
    "Margin",
    "Margins",
    "parse_height",
    "parse_margin_value",
    "parse_margins",
    # Terminal
    "ProcessTerminal",
    "TerminalSurface",
    "ensure_wide_locale",
    # Themes
    "COLOR_DEFAULT",
    "DARK256",
    "DEFAULT16",
    "LIGHT256",
    "MONOKAI256",
    "ColorTheme",
    "base_theme_for",
    "parse_color_spec",
    "shadow",
    # Viewport
    "TerminalQueryError",
    "Viewport",
    "open_screen",
    "query_cursor_position",
    # Utilities
    "text_width",
]
