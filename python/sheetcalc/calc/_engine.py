"""RecalcEngine: pushes a cell change through every formula that reads it."""

from __future__ import annotations

import logging

from sheetcalc._values import CellValue, Real, as_number, is_numeric
from sheetcalc.calc._errors import EvalError
from sheetcalc.calc._evaluator import FormulaEvaluator
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._options import CalcOptions
from sheetcalc.calc._protocol import CellDelta, Coordinate, GridAccessor, RecalcResult

logger = logging.getLogger(__name__)


def _values_differ(a: CellValue, b: CellValue, tolerance: float) -> bool:
    """Check if two cell values differ beyond tolerance."""
    if is_numeric(a) and is_numeric(b):
        return abs(as_number(a) - as_number(b)) > tolerance
    return a != b


class RecalcEngine:
    """Recalculates dependents after a mutation.

    Usage::

        engine = RecalcEngine()
        grid.set_cell(0, 0, Integer(20))
        result = engine.on_mutation((0, 0), grid)
        result.changed()   # {(0, 2): Real(25.0)}

    Propagation is depth-first in row-major order.  Each recursive step
    carries the set of cells currently being recalculated on its chain, and a
    cell already on the chain is skipped, so cyclic formulas terminate.  A
    recalculated cell whose value stays within *tolerance* of the old one
    does not propagate further.
    """

    def __init__(
        self,
        options: CalcOptions | None = None,
        evaluator: FormulaEvaluator | None = None,
        *,
        tolerance: float = 1e-10,
    ) -> None:
        self._evaluator = evaluator or FormulaEvaluator(options)
        self._tolerance = tolerance

    @property
    def evaluator(self) -> FormulaEvaluator:
        return self._evaluator

    def on_mutation(self, coord: Coordinate, grid: GridAccessor) -> RecalcResult:
        """Recalculate every formula cell depending, directly or not, on *coord*."""
        graph = DependencyGraph(grid)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Change at %s reaches %d formula cells (depth %d)",
                grid.label_of(*coord),
                len(graph.affected_cells({coord})),
                graph.max_depth({coord}),
            )

        deltas: dict[Coordinate, CellDelta] = {}
        errors: dict[Coordinate, str] = {}
        self._propagate(coord, grid, graph, set(), deltas, errors)
        return RecalcResult(origin=coord, deltas=tuple(deltas.values()), errors=errors)

    def _propagate(
        self,
        coord: Coordinate,
        grid: GridAccessor,
        graph: DependencyGraph,
        in_progress: set[Coordinate],
        deltas: dict[Coordinate, CellDelta],
        errors: dict[Coordinate, str],
    ) -> None:
        in_progress.add(coord)
        try:
            for dep in graph.dependents_of(coord):
                if dep in in_progress:
                    logger.debug(
                        "Skipping %s: already being recalculated (cycle)",
                        grid.label_of(*dep),
                    )
                    continue
                formula = graph.formula_of(dep)
                try:
                    result = self._evaluator.evaluate(formula, dep, grid)
                except EvalError as exc:
                    logger.warning(
                        "Error recalculating %s (%s): %s",
                        grid.label_of(*dep), formula, exc,
                    )
                    errors[dep] = str(exc)
                    continue

                errors.pop(dep, None)
                old_value = grid.get_cell(*dep)
                new_value = Real(result.value)
                grid.set_cell(dep[0], dep[1], new_value)
                graph.record(dep, formula, result.dependencies)
                if not _values_differ(old_value, new_value, self._tolerance):
                    continue

                # one delta per cell: first old value, latest new value
                previous = deltas.get(dep)
                deltas[dep] = CellDelta(
                    coord=dep,
                    label=grid.label_of(*dep),
                    old_value=previous.old_value if previous else old_value,
                    new_value=new_value,
                    formula=formula,
                )
                self._propagate(dep, grid, graph, in_progress, deltas, errors)
        finally:
            in_progress.discard(coord)
