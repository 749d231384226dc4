"""Grid: rectangular cell storage addressed by ``(row, col)`` or ``grid['A1']``."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from sheetcalc._utils import rowcol_to_a1, try_a1_to_rowcol
from sheetcalc._values import EMPTY, CellValue
from sheetcalc.calc._protocol import Coordinate, FormulaRecord

DEFAULT_MAX_ROWS = 100
DEFAULT_MAX_COLS = 50


@dataclass
class Cell:
    """One grid slot: its resolved value plus, for formula cells, the formula."""

    value: CellValue = EMPTY
    formula: FormulaRecord | None = None


class Grid:
    """Row-major grid of :class:`Cell` records.

    Implements :class:`sheetcalc.calc.GridAccessor`.  The grid grows through
    :meth:`grow` and never shrinks; cells are never deleted individually.
    """

    __slots__ = ("_rows", "_max_rows", "_max_cols")

    def __init__(
        self,
        rows: int = 3,
        cols: int = 3,
        *,
        max_rows: int = DEFAULT_MAX_ROWS,
        max_cols: int = DEFAULT_MAX_COLS,
    ) -> None:
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid needs at least one row and column, got {rows}x{cols}")
        self._max_rows = max_rows
        self._max_cols = max_cols
        self._check_limits(rows, cols)
        self._rows: list[list[Cell]] = [[Cell() for _ in range(cols)] for _ in range(rows)]

    # ------------------------------------------------------------------
    # Extents
    # ------------------------------------------------------------------

    def row_count(self) -> int:
        return len(self._rows)

    def col_count(self) -> int:
        return len(self._rows[0])

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.row_count() and 0 <= col < self.col_count()

    def grow(self, rows: int, cols: int) -> None:
        """Extend the grid to at least ``rows x cols``; smaller sizes are a no-op."""
        rows = max(rows, self.row_count())
        cols = max(cols, self.col_count())
        self._check_limits(rows, cols)
        extra_cols = cols - self.col_count()
        if extra_cols:
            for row in self._rows:
                row.extend(Cell() for _ in range(extra_cols))
        while len(self._rows) < rows:
            self._rows.append([Cell() for _ in range(cols)])

    def _check_limits(self, rows: int, cols: int) -> None:
        if rows > self._max_rows or cols > self._max_cols:
            raise ValueError(
                f"Grid size {rows}x{cols} exceeds limit {self._max_rows}x{self._max_cols}"
            )

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise IndexError(
                f"Cell ({row}, {col}) outside {self.row_count()}x{self.col_count()} grid"
            )
        return self._rows[row][col]

    def get_cell(self, row: int, col: int) -> CellValue:
        return self.cell(row, col).value

    def set_cell(self, row: int, col: int, value: CellValue) -> None:
        self.cell(row, col).value = value

    def formula_record(self, row: int, col: int) -> FormulaRecord | None:
        return self.cell(row, col).formula

    def set_formula_record(self, row: int, col: int, record: FormulaRecord | None) -> None:
        self.cell(row, col).formula = record

    def __getitem__(self, key: str) -> CellValue:
        """``grid['A1']`` -> CellValue."""
        coord = self.resolve_label(key)
        if coord is None:
            raise KeyError(key)
        return self.get_cell(*coord)

    # ------------------------------------------------------------------
    # Labels and ranges
    # ------------------------------------------------------------------

    def label_of(self, row: int, col: int) -> str:
        return rowcol_to_a1(row, col)

    def resolve_label(self, label: str) -> Coordinate | None:
        coord = try_a1_to_rowcol(label)
        if coord is None or not self.in_bounds(*coord):
            return None
        return coord

    def cells_in_range(self, start: Coordinate, end: Coordinate) -> list[Coordinate]:
        r_min, r_max = min(start[0], end[0]), max(start[0], end[0])
        c_min, c_max = min(start[1], end[1]), max(start[1], end[1])
        return [(r, c) for r in range(r_min, r_max + 1) for c in range(c_min, c_max + 1)]

    def iter_coords(self) -> Iterator[Coordinate]:
        """All coordinates in row-major order."""
        for r, row in enumerate(self._rows):
            for c in range(len(row)):
                yield (r, c)

    def iter_formula_cells(self) -> Iterator[tuple[Coordinate, FormulaRecord]]:
        """``(coord, record)`` for every formula cell, row-major."""
        for r, row in enumerate(self._rows):
            for c, cell in enumerate(row):
                if cell.formula is not None:
                    yield (r, c), cell.formula

    def values(self) -> list[list[CellValue]]:
        """Snapshot of all values as nested lists."""
        return [[cell.value for cell in row] for row in self._rows]

    def __repr__(self) -> str:
        return f"<Grid {self.row_count()}x{self.col_count()}>"
