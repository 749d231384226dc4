"""Coordinate helpers: 0-based ``(row, col)`` <-> A1 labels.

Column letters are delegated to openpyxl so labels agree with Excel and with
every other openpyxl-based tool (``0 -> "A"``, ``26 -> "AA"``).
"""

from __future__ import annotations

import re

from openpyxl.utils.cell import column_index_from_string, get_column_letter

_A1_RE = re.compile(r"^\$?([A-Za-z]{1,3})\$?([1-9]\d*)$")


def column_letter(col: int) -> str:
    """0-based column index -> column letters."""
    if col < 0:
        raise ValueError(f"Invalid column index: {col}")
    return get_column_letter(col + 1)


def column_index(letters: str) -> int:
    """Column letters -> 0-based column index (case-insensitive)."""
    return column_index_from_string(letters.upper()) - 1


def rowcol_to_a1(row: int, col: int) -> str:
    if row < 0:
        raise ValueError(f"Invalid row index: {row}")
    return f"{column_letter(col)}{row + 1}"


def a1_to_rowcol(ref: str) -> tuple[int, int]:
    """Parse an A1 label into a 0-based ``(row, col)`` pair.

    Raises ValueError for anything that is not a single cell label.
    """
    m = _A1_RE.match(ref.strip())
    if not m:
        raise ValueError(f"Invalid A1 reference: {ref!r}")
    return int(m.group(2)) - 1, column_index(m.group(1))


def try_a1_to_rowcol(ref: str) -> tuple[int, int] | None:
    """Like :func:`a1_to_rowcol` but returns None instead of raising."""
    try:
        return a1_to_rowcol(ref)
    except ValueError:
        return None
