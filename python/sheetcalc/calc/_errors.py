"""Formula evaluation errors.

All of them are local to one cell's formula: callers catch ``EvalError``,
keep the cell's previous value and carry on.
"""

from __future__ import annotations


class EvalError(Exception):
    """Base class for formula evaluation failures."""

    def __init__(self, message: str, formula: str | None = None) -> None:
        super().__init__(message)
        self.formula = formula


class MalformedFormula(EvalError):
    """Formula text cannot be split into operands (e.g. ``=A1+``)."""


class InvalidReference(EvalError):
    """A function range endpoint does not name a cell of the grid."""


class InvalidToken(EvalError):
    """Operand is neither a cell reference, a function call nor a number."""


class DivisionByZero(EvalError):
    """Raised for ``x/0`` when the engine is configured with ``zero_divisor="raise"``."""
