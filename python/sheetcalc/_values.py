"""Cell value model: a closed set of frozen variants.

Every consumer dispatches over exactly these four classes; anything else is a
programming error and raises ``TypeError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Empty:
    """A cell that was never assigned, or was cleared."""

    def __str__(self) -> str:
        return ""


@dataclass(frozen=True)
class Integer:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Real:
    value: float

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class Text:
    value: str

    def __str__(self) -> str:
        return self.value


CellValue = Empty | Integer | Real | Text

EMPTY = Empty()

_INT_RE = re.compile(r"^[+-]?\d+$")
_REAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def as_number(value: CellValue) -> float:
    """Numeric view of a cell value. Text and Empty read as ``0.0``."""
    if isinstance(value, (Integer, Real)):
        return float(value.value)
    if isinstance(value, (Text, Empty)):
        return 0.0
    raise TypeError(f"Not a cell value: {value!r}")


def is_numeric(value: CellValue) -> bool:
    if isinstance(value, (Integer, Real)):
        return True
    if isinstance(value, (Text, Empty)):
        return False
    raise TypeError(f"Not a cell value: {value!r}")


def parse_input(text: str) -> CellValue:
    """Classify raw (non-formula) input the way a user typed it.

    ``"12"`` -> Integer, ``"1.5"`` / ``"2e3"`` -> Real, ``""`` -> Empty,
    everything else -> Text.  The whole string must match; ``"12abc"`` is Text.
    """
    if text == "":
        return EMPTY
    stripped = text.strip()
    if _INT_RE.match(stripped):
        return Integer(int(stripped))
    if _REAL_RE.match(stripped):
        return Real(float(stripped))
    return Text(text)


def from_python(value: object) -> CellValue:
    """Wrap a plain Python scalar (as produced by loaders) in a cell value."""
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return Integer(int(value))
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, float):
        return Real(value)
    if isinstance(value, str):
        return parse_input(value)
    raise TypeError(f"Unsupported cell content: {value!r}")
