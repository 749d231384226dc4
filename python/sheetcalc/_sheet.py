"""Sheet - the host side of the engine: data entry, commit, recalculation.

``Sheet.enter()`` is what a UI or a loader calls when the user types into a
cell.  Formula input is evaluated first and only committed on success; plain
input is classified into Integer / Real / Text / Empty.  Either way the
change is then pushed through every dependent formula.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sheetcalc._grid import DEFAULT_MAX_COLS, DEFAULT_MAX_ROWS, Grid
from sheetcalc._values import CellValue, Real, from_python, parse_input
from sheetcalc.calc._engine import RecalcEngine
from sheetcalc.calc._errors import EvalError
from sheetcalc.calc._evaluator import FormulaEvaluator
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._options import CalcOptions
from sheetcalc.calc._protocol import Coordinate, RecalcResult

logger = logging.getLogger(__name__)


class Sheet:
    """A single spreadsheet: a grid plus its formula engine.

    Usage::

        sheet = Sheet()
        sheet["A1"] = "10"
        sheet["B1"] = "5"
        sheet["C1"] = "=A1+B1"
        sheet["C1"]            # Real(15.0)
        sheet["A1"] = "20"
        sheet["C1"]            # Real(25.0)
    """

    def __init__(
        self,
        rows: int = 3,
        cols: int = 3,
        *,
        options: CalcOptions | None = None,
        max_rows: int = DEFAULT_MAX_ROWS,
        max_cols: int = DEFAULT_MAX_COLS,
    ) -> None:
        self._grid = Grid(rows, cols, max_rows=max_rows, max_cols=max_cols)
        self._options = options or CalcOptions()
        self._evaluator = FormulaEvaluator(self._options)
        self._engine = RecalcEngine(evaluator=self._evaluator)
        self._graph = DependencyGraph(self._grid)
        # formulas that failed to evaluate, kept as text only
        self._inert: dict[Coordinate, str] = {}

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def options(self) -> CalcOptions:
        return self._options

    @property
    def evaluator(self) -> FormulaEvaluator:
        return self._evaluator

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def enter(self, row: int, col: int, text: str) -> RecalcResult:
        """Assign user input to a cell and recalculate its dependents.

        A formula that fails to evaluate leaves the cell's previous value in
        place; the text is remembered as inert (see :meth:`inert_formula`)
        and the error is reported in the returned result.
        """
        self._grid.cell(row, col)  # bounds check before touching anything
        coord = (row, col)
        if text.startswith("="):
            return self._enter_formula(coord, text)

        self._inert.pop(coord, None)
        self._graph.forget(coord)
        self._grid.set_cell(row, col, parse_input(text))
        return self._engine.on_mutation(coord, self._grid)

    def _enter_formula(self, coord: Coordinate, formula: str) -> RecalcResult:
        try:
            result = self._evaluator.evaluate(formula, coord, self._grid)
        except EvalError as exc:
            logger.debug("Keeping previous value of %s: %s", self._grid.label_of(*coord), exc)
            self._graph.forget(coord)
            self._inert[coord] = formula
            return RecalcResult(origin=coord, errors={coord: str(exc)})

        self._inert.pop(coord, None)
        self._grid.set_cell(coord[0], coord[1], Real(result.value))
        self._graph.record(coord, formula, result.dependencies)
        return self._engine.on_mutation(coord, self._grid)

    def set_value(self, row: int, col: int, value: CellValue) -> RecalcResult:
        """Store an already-typed value (no parsing) and recalculate."""
        self._grid.cell(row, col)
        coord = (row, col)
        self._inert.pop(coord, None)
        self._graph.forget(coord)
        self._grid.set_cell(row, col, value)
        return self._engine.on_mutation(coord, self._grid)

    def enter_label(self, label: str, text: str) -> RecalcResult:
        return self.enter(*self._coord(label), text)

    def __setitem__(self, label: str, text: str) -> None:
        """``sheet['A1'] = '42'`` - shorthand for :meth:`enter_label`."""
        self.enter_label(label, text)

    def grow(self, rows: int, cols: int) -> None:
        self._grid.grow(rows, cols)

    def load_rows(self, rows: Iterable[Iterable[Any]]) -> list[RecalcResult]:
        """Bulk-enter a 2D block of values starting at A1, row-major.

        Strings go through :meth:`enter` (so ``"=..."`` is a formula);
        ``None`` leaves a cell untouched; ints and floats are stored as-is.
        The grid grows to fit.  Results are returned for cells reporting
        errors only.
        """
        block = [list(r) for r in rows]
        height = len(block)
        width = max((len(r) for r in block), default=0)
        if height and width:
            self._grid.grow(height, width)

        failures: list[RecalcResult] = []
        for r, row_vals in enumerate(block):
            for c, val in enumerate(row_vals):
                if val is None:
                    continue
                if isinstance(val, str):
                    result = self.enter(r, c, val)
                else:
                    result = self.set_value(r, c, from_python(val))
                if not result.ok:
                    failures.append(result)
        return failures

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def value(self, row: int, col: int) -> CellValue:
        return self._grid.get_cell(row, col)

    def value_of(self, label: str) -> CellValue:
        return self.value(*self._coord(label))

    def __getitem__(self, label: str) -> CellValue:
        return self.value_of(label)

    def formula(self, row: int, col: int) -> str | None:
        """Formula text of a live formula cell, else None."""
        return self._graph.formula_of((row, col))

    def inert_formula(self, row: int, col: int) -> str | None:
        """Formula text that was entered but failed to evaluate, if any."""
        return self._inert.get((row, col))

    def dependencies(self, row: int, col: int) -> frozenset[Coordinate]:
        return self._graph.dependencies_of((row, col))

    def dependency_labels(self, row: int, col: int) -> list[str]:
        return [self._grid.label_of(*c) for c in sorted(self.dependencies(row, col))]

    def _coord(self, label: str) -> Coordinate:
        coord = self._grid.resolve_label(label)
        if coord is None:
            raise KeyError(f"No cell labelled {label!r} in {self._grid!r}")
        return coord

    def __repr__(self) -> str:
        return f"<Sheet {self._grid.row_count()}x{self._grid.col_count()}>"
