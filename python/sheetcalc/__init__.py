"""sheetcalc - a small spreadsheet with a recalculating formula engine.

Usage::

    from sheetcalc import Sheet

    sheet = Sheet()                  # 3x3, grows on demand
    sheet["A1"] = "10"
    sheet["B1"] = "5"
    sheet["C1"] = "=A1+B1"           # Real(15.0)
    sheet["A2"] = "=SUM(A1..B1)/2"   # ranges use "..", five aggregates
    sheet["A1"] = "20"               # C1 and A2 recalculate
"""

from sheetcalc._grid import Cell, Grid
from sheetcalc._sheet import Sheet
from sheetcalc._values import (
    EMPTY,
    CellValue,
    Empty,
    Integer,
    Real,
    Text,
    as_number,
    parse_input,
)
from sheetcalc.calc import CalcOptions, EvalError, RecalcResult

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CalcOptions",
    "Cell",
    "CellValue",
    "EMPTY",
    "Empty",
    "EvalError",
    "Grid",
    "Integer",
    "Real",
    "RecalcResult",
    "Sheet",
    "Text",
    "as_number",
    "parse_input",
]
