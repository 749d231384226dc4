"""FormulaEvaluator: evaluates flat arithmetic formulas against a grid.

A formula body is reduced in two passes, each strictly left to right::

    =A1 + B1*2/C1 - SUM(A1..B3)
     ^^   ^^^^^^^^   ^^^^^^^^^^^   additive operands
          B1 * 2 / C1              multiplicative operands

Every cell read on the way (single references and each cell of a function
range) is collected into the dependency set returned with the value.
"""

from __future__ import annotations

import logging

from sheetcalc._values import as_number, is_numeric
from sheetcalc.calc._errors import (
    DivisionByZero,
    EvalError,
    InvalidReference,
    InvalidToken,
    MalformedFormula,
)
from sheetcalc.calc._functions import FunctionRegistry
from sheetcalc.calc._options import DEFAULT_OPTIONS, CalcOptions
from sheetcalc.calc._parser import (
    is_numeric_literal,
    is_operator,
    match_function_call,
    split_additive,
    split_multiplicative,
    strip_formula,
)
from sheetcalc.calc._protocol import Coordinate, Evaluation, GridAccessor

logger = logging.getLogger(__name__)


class FormulaEvaluator:
    """Evaluates formulas such as ``=A1+SUM(B1..B3)/2``.

    Usage::

        evaluator = FormulaEvaluator()
        result = evaluator.evaluate("=A1+B1", (0, 2), grid)
        result.value          # 15.0
        result.dependencies   # frozenset({(0, 0), (0, 1)})

    Failures raise a subclass of :class:`EvalError`; nothing is written to
    the grid either way.
    """

    def __init__(
        self,
        options: CalcOptions | None = None,
        functions: FunctionRegistry | None = None,
    ) -> None:
        self._options = options or DEFAULT_OPTIONS
        self._functions = functions or FunctionRegistry()

    @property
    def options(self) -> CalcOptions:
        return self._options

    @property
    def functions(self) -> FunctionRegistry:
        return self._functions

    def evaluate(self, formula: str, target: Coordinate, grid: GridAccessor) -> Evaluation:
        """Evaluate *formula* (with its leading ``=``) for the cell at *target*."""
        reads: set[Coordinate] = set()
        try:
            body = strip_formula(formula)
            value = self._eval_additive(body, grid, reads)
        except EvalError as exc:
            if exc.formula is None:
                exc.formula = formula
            logger.debug(
                "Cannot evaluate formula %r in %s: %s",
                formula, grid.label_of(*target), exc,
            )
            raise
        return Evaluation(value=value, dependencies=frozenset(reads))

    # ------------------------------------------------------------------
    # Reduction
    # ------------------------------------------------------------------

    def _eval_additive(self, body: str, grid: GridAccessor, reads: set[Coordinate]) -> float:
        result = 0.0
        subtract = False
        for token in split_additive(body):
            if token == "+":
                subtract = False
            elif token == "-":
                subtract = True
            else:
                term = self._eval_multiplicative(token, grid, reads)
                result = result - term if subtract else result + term
        return result

    def _eval_multiplicative(
        self, operand: str, grid: GridAccessor, reads: set[Coordinate],
    ) -> float:
        tokens = split_multiplicative(operand)
        if is_operator(tokens[0]):
            raise MalformedFormula(f"Leading operator {tokens[0]!r} in {operand!r}")

        result = self._eval_operand(tokens[0], grid, reads)
        divide = False
        for token in tokens[1:]:
            if token == "*":
                divide = False
            elif token == "/":
                divide = True
            else:
                value = self._eval_operand(token, grid, reads)
                if not divide:
                    result *= value
                    continue
                if value == 0.0:
                    if self._options.zero_divisor == "raise":
                        raise DivisionByZero(f"Division by zero in {operand!r}")
                    value = 1.0
                result /= value
        return result

    # ------------------------------------------------------------------
    # Operands
    # ------------------------------------------------------------------

    def _eval_operand(self, token: str, grid: GridAccessor, reads: set[Coordinate]) -> float:
        """Resolve one operand.

        Dispatch order (first match wins):

        1. Cell reference (``B2``)
        2. Aggregate call over a range (``SUM(A1..B2)``)
        3. Numeric literal (``12``, ``1.5``)
        """
        coord = grid.resolve_label(token)
        if coord is not None:
            reads.add(coord)
            return as_number(grid.get_cell(*coord))

        call = match_function_call(token)
        if call is not None:
            return self._eval_function(*call, grid, reads)

        if is_numeric_literal(token):
            return float(token)

        raise InvalidToken(
            f"{token!r} is not a cell reference, function call or number"
        )

    def _eval_function(
        self,
        name: str,
        start_label: str,
        end_label: str,
        grid: GridAccessor,
        reads: set[Coordinate],
    ) -> float:
        func = self._functions.get(name)
        if func is None:
            raise InvalidToken(f"Unknown function {name!r}")

        start = grid.resolve_label(start_label)
        end = grid.resolve_label(end_label)
        if start is None or end is None:
            bad = start_label if start is None else end_label
            raise InvalidReference(f"Invalid cell reference {bad!r} in {name} range")

        coords = grid.cells_in_range(start, end)
        reads.update(coords)
        values = [grid.get_cell(*c) for c in coords]
        if self._options.skip_non_numeric:
            numbers = [as_number(v) for v in values if is_numeric(v)]
        else:
            numbers = [as_number(v) for v in values]
        return float(func(numbers))
