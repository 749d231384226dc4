"""GridAccessor protocol and result dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sheetcalc._values import CellValue

Coordinate = tuple[int, int]  # (row, col), 0-based


@dataclass(frozen=True)
class FormulaRecord:
    """A formula and the cells its last successful evaluation read."""

    formula: str  # original text, starting with "="
    dependencies: frozenset[Coordinate] = frozenset()


@dataclass(frozen=True)
class Evaluation:
    """Outcome of one successful formula evaluation."""

    value: float
    dependencies: frozenset[Coordinate]


@dataclass(frozen=True)
class CellDelta:
    """A single cell's value change from recalculation."""

    coord: Coordinate
    label: str  # "A1"
    old_value: CellValue
    new_value: CellValue
    formula: str | None = None  # the formula that produced new_value


@dataclass(frozen=True)
class RecalcResult:
    """What one propagation wave did."""

    origin: Coordinate
    deltas: tuple[CellDelta, ...] = ()  # one per changed cell
    errors: Mapping[Coordinate, str] = field(default_factory=dict)  # coord -> message

    @property
    def recalculated(self) -> int:
        return len(self.deltas)

    @property
    def ok(self) -> bool:
        return not self.errors

    def changed(self) -> dict[Coordinate, CellValue]:
        """Final value per changed cell."""
        return {d.coord: d.new_value for d in self.deltas}


@runtime_checkable
class GridAccessor(Protocol):
    """What the formula engine needs from the grid hosting it.

    The grid owns every cell; the engine only reads and writes through these
    calls and never keeps references across them.
    """

    def get_cell(self, row: int, col: int) -> CellValue:
        ...

    def set_cell(self, row: int, col: int, value: CellValue) -> None:
        ...

    def formula_record(self, row: int, col: int) -> FormulaRecord | None:
        ...

    def set_formula_record(self, row: int, col: int, record: FormulaRecord | None) -> None:
        ...

    def row_count(self) -> int:
        ...

    def col_count(self) -> int:
        ...

    def label_of(self, row: int, col: int) -> str:
        ...

    def resolve_label(self, label: str) -> Coordinate | None:
        """Inverse of ``label_of``; None when no cell carries that label."""
        ...

    def cells_in_range(self, start: Coordinate, end: Coordinate) -> list[Coordinate]:
        """Rectangular span, row-major, whichever corner comes first."""
        ...
