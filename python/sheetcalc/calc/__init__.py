"""sheetcalc.calc - Formula evaluation and recalculation engine."""

from sheetcalc.calc._engine import RecalcEngine
from sheetcalc.calc._errors import (
    DivisionByZero,
    EvalError,
    InvalidReference,
    InvalidToken,
    MalformedFormula,
)
from sheetcalc.calc._evaluator import FormulaEvaluator
from sheetcalc.calc._functions import AGGREGATE_FUNCTIONS, FunctionRegistry, is_supported
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._options import CalcOptions
from sheetcalc.calc._parser import split_additive, split_multiplicative
from sheetcalc.calc._protocol import (
    CellDelta,
    Coordinate,
    Evaluation,
    FormulaRecord,
    GridAccessor,
    RecalcResult,
)

__all__ = [
    "AGGREGATE_FUNCTIONS",
    "CalcOptions",
    "CellDelta",
    "Coordinate",
    "DependencyGraph",
    "DivisionByZero",
    "EvalError",
    "Evaluation",
    "FormulaEvaluator",
    "FormulaRecord",
    "FunctionRegistry",
    "GridAccessor",
    "InvalidReference",
    "InvalidToken",
    "MalformedFormula",
    "RecalcEngine",
    "RecalcResult",
    "is_supported",
    "split_additive",
    "split_multiplicative",
]
