"""Screen configuration.

Options come as strings in the same grammar a command line would use.
They can be loaded from the ``screen`` section of a settings file or from
the environment::

    PI_SCREEN_MARGIN            margin spec, e.g. "1,10%"
    PI_SCREEN_HEIGHT            height spec, e.g. "40%" or "15"
    PI_SCREEN_COLOR             color spec, e.g. "molokai,matched:108"
    PI_SCREEN_BLACK             "1" to force a black background
    PI_SCREEN_QUERY_TIMEOUT_MS  cursor position query timeout
    NO_COLOR                    any value turns color off
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

from pi.screen.margin import Margin, Margins, parse_height, parse_margins
from pi.screen.theme import ColorTheme, parse_color_spec

_TRUTHY = ("1", "true", "yes", "on")

# settings.json key -> ScreenConfig field
_SETTINGS_KEYS = {
    "margin": "margin",
    "height": "height",
    "color": "color",
    "useColor": "use_color",
    "black": "black",
    "cursorQueryTimeoutMs": "cursor_query_timeout_ms",
}


@dataclass
class ScreenConfig:
    """Viewport and color options."""

    margin: str = "0"
    height: str = "100%"
    color: str | None = None
    use_color: bool = True
    black: bool = False
    cursor_query_timeout_ms: int = 1000

    # --- Factories ---

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None) -> ScreenConfig:
        """Build from a settings ``screen`` section; ``None`` values are skipped."""
        return cls().merged(settings or {})

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        base: ScreenConfig | None = None,
    ) -> ScreenConfig:
        """Apply ``PI_SCREEN_*`` environment overrides on top of *base*."""
        env = os.environ if environ is None else environ
        config = base if base is not None else cls()
        overrides: dict[str, Any] = {}

        if "PI_SCREEN_MARGIN" in env:
            overrides["margin"] = env["PI_SCREEN_MARGIN"]
        if "PI_SCREEN_HEIGHT" in env:
            overrides["height"] = env["PI_SCREEN_HEIGHT"]
        if "PI_SCREEN_COLOR" in env:
            overrides["color"] = env["PI_SCREEN_COLOR"]
        if "PI_SCREEN_BLACK" in env:
            overrides["black"] = env["PI_SCREEN_BLACK"].lower() in _TRUTHY
        if "PI_SCREEN_QUERY_TIMEOUT_MS" in env:
            try:
                overrides["cursor_query_timeout_ms"] = int(
                    env["PI_SCREEN_QUERY_TIMEOUT_MS"]
                )
            except ValueError:
                pass
        if env.get("NO_COLOR"):
            overrides["use_color"] = False

        return replace(config, **overrides)

    def merged(self, settings: Mapping[str, Any]) -> ScreenConfig:
        """Return a copy with the camelCase *settings* keys applied."""
        overrides = {
            field_name: settings[key]
            for key, field_name in _SETTINGS_KEYS.items()
            if settings.get(key) is not None
        }
        return replace(self, **overrides)

    # --- Parsed values ---

    def margins(self) -> Margins:
        return parse_margins(self.margin)

    def height_margin(self) -> Margin:
        return parse_height(self.height)

    def theme(self) -> ColorTheme | None:
        """The user theme, or ``None`` when color is turned off."""
        if not self.use_color:
            return None
        return parse_color_spec(self.color) if self.color else ColorTheme()

    @property
    def cursor_query_timeout(self) -> float | None:
        """Timeout in seconds; zero or less waits forever."""
        if self.cursor_query_timeout_ms <= 0:
            return None
        return self.cursor_query_timeout_ms / 1000.0
