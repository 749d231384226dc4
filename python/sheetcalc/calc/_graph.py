"""Dependency graph over the formula records stored in a grid.

The grid's cells are the single source of truth: each formula cell carries a
:class:`FormulaRecord` with the exact set of cells its last successful
evaluation read.  This class reads those records to answer "who depends on
X" and replaces them wholesale when a formula is re-evaluated.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from sheetcalc.calc._protocol import Coordinate, FormulaRecord, GridAccessor


class DependencyGraph:
    """Formula-cell dependencies of one grid.

    All coordinates are 0-based ``(row, col)`` tuples; every list this class
    returns is in row-major order.
    """

    __slots__ = ("_grid",)

    def __init__(self, grid: GridAccessor) -> None:
        self._grid = grid

    def record(
        self, coord: Coordinate, formula: str, dependencies: Iterable[Coordinate],
    ) -> FormulaRecord:
        """Store *formula* for *coord* with a fresh dependency set.

        The previous record (if any) is discarded, never merged.
        """
        record = FormulaRecord(formula=formula, dependencies=frozenset(dependencies))
        self._grid.set_formula_record(coord[0], coord[1], record)
        return record

    def forget(self, coord: Coordinate) -> None:
        """Turn *coord* back into a plain value cell."""
        self._grid.set_formula_record(coord[0], coord[1], None)

    def formula_of(self, coord: Coordinate) -> str | None:
        record = self._grid.formula_record(*coord)
        return record.formula if record is not None else None

    def dependencies_of(self, coord: Coordinate) -> frozenset[Coordinate]:
        record = self._grid.formula_record(*coord)
        return record.dependencies if record is not None else frozenset()

    def formula_cells(self) -> list[Coordinate]:
        return [coord for coord, _ in self._iter_records()]

    def dependents_of(self, coord: Coordinate) -> list[Coordinate]:
        """Formula cells whose dependency set contains *coord*."""
        return [c for c, record in self._iter_records() if coord in record.dependencies]

    def affected_cells(self, changed: set[Coordinate]) -> list[Coordinate]:
        """All formula cells reachable from *changed* through dependents (BFS)."""
        reverse = self._reverse_edges()
        affected: set[Coordinate] = set()
        queue: deque[Coordinate] = deque(changed)
        visited: set[Coordinate] = set(changed)

        while queue:
            cell = queue.popleft()
            for dep in reverse.get(cell, ()):
                affected.add(dep)
                if dep not in visited:
                    visited.add(dep)
                    queue.append(dep)

        return sorted(affected)

    def max_depth(self, roots: set[Coordinate]) -> int:
        """Longest dependency chain (in formula cells) starting at *roots*.

        Cycles are cut where a chain would revisit one of its own cells.
        """
        reverse = self._reverse_edges()

        def walk(cell: Coordinate, on_path: set[Coordinate]) -> int:
            best = 0
            for dep in reverse.get(cell, ()):
                if dep in on_path:
                    continue
                on_path.add(dep)
                best = max(best, 1 + walk(dep, on_path))
                on_path.discard(dep)
            return best

        return max((walk(r, {r}) for r in roots), default=0)

    # ------------------------------------------------------------------

    def _iter_records(self) -> Iterable[tuple[Coordinate, FormulaRecord]]:
        grid = self._grid
        for r in range(grid.row_count()):
            for c in range(grid.col_count()):
                record = grid.formula_record(r, c)
                if record is not None:
                    yield (r, c), record

    def _reverse_edges(self) -> dict[Coordinate, list[Coordinate]]:
        # cell -> formula cells that read it, row-major
        reverse: dict[Coordinate, list[Coordinate]] = {}
        for coord, record in self._iter_records():
            for dep in record.dependencies:
                reverse.setdefault(dep, []).append(coord)
        return reverse
