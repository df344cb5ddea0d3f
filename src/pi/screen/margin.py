"""Margin values and the margin/height option grammar.

A margin is either a fixed number of rows/columns (``"3"``) or a
percentage of the dimension it is applied to (``"10%"``). The margin
option takes one to four comma-separated values, CSS style::

    "1"           all sides
    "1,2"         top/bottom, right/left
    "1,2,3"       top, right/left, bottom
    "1,2,3,4"     top, right, bottom, left
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, NamedTuple

MarginKind = Literal["fixed", "percent"]

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Margin:
    kind: MarginKind
    value: int

    @classmethod
    def fixed(cls, value: int) -> Margin:
        return cls("fixed", value)

    @classmethod
    def percent(cls, value: int) -> Margin:
        return cls("percent", value)

    @property
    def is_full(self) -> bool:
        """``True`` for ``100%``, the whole available dimension."""
        return self.kind == "percent" and self.value == 100

    def resolve(self, total: int) -> int:
        """Number of rows/columns this margin covers out of *total*."""
        if self.kind == "fixed":
            return self.value
        return self.value * total // 100

    def __str__(self) -> str:
        return f"{self.value}%" if self.kind == "percent" else str(self.value)


FULL = Margin.percent(100)
ZERO = Margin.fixed(0)


class Margins(NamedTuple):
    top: Margin
    right: Margin
    bottom: Margin
    left: Margin


NO_MARGINS = Margins(ZERO, ZERO, ZERO, ZERO)


def _parse_int(text: str) -> int | None:
    return int(text) if _INT_RE.fullmatch(text) else None


def parse_margin_value(text: str) -> Margin:
    """Parse a single margin or height value.

    A trailing ``%`` makes it a percentage (an unparseable number means
    100%); anything else is a fixed count (unparseable means 0).
    """
    text = text.strip()
    if text.endswith("%"):
        value = _parse_int(text[:-1].strip())
        return Margin.percent(100 if value is None else value)
    value = _parse_int(text)
    return Margin.fixed(0 if value is None else value)


def parse_margins(spec: str) -> Margins:
    """Parse a margin option into ``(top, right, bottom, left)``.

    Any number of components other than one to four gives no margins.
    """
    values = [parse_margin_value(part) for part in spec.split(",")]

    if len(values) == 1:
        (m,) = values
        return Margins(m, m, m, m)
    if len(values) == 2:
        vertical, horizontal = values
        return Margins(vertical, horizontal, vertical, horizontal)
    if len(values) == 3:
        top, horizontal, bottom = values
        return Margins(top, horizontal, bottom, horizontal)
    if len(values) == 4:
        return Margins(*values)
    return NO_MARGINS


def parse_height(spec: str | None) -> Margin:
    """Parse the height option; no value means the full screen."""
    if spec is None:
        return FULL
    return parse_margin_value(spec)
