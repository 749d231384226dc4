"""Formula tokenizer: two-level operator splitting, no expression tree.

Formulas are flat: ``+``/``-`` split the additive level, ``*``/``/`` split
each additive operand, and parentheses only ever wrap a function's range
argument (``SUM(A1..B2)``).  Operators of one level bind left to right.
"""

from __future__ import annotations

import re

from sheetcalc.calc._errors import MalformedFormula

ADDITIVE_OPERATORS = frozenset("+-")
MULTIPLICATIVE_OPERATORS = frozenset("*/")
OPERATORS = ADDITIVE_OPERATORS | MULTIPLICATIVE_OPERATORS

RANGE_SEPARATOR = ".."

# NAME(start..end); name and endpoints are validated by the evaluator
_CALL_RE = re.compile(r"^([A-Za-z][A-Za-z0-9_]*)\((.*)\)$")
_NUMBER_RE = re.compile(r"^(?:\d+\.?\d*|\.\d+)$")


def strip_formula(formula: str) -> str:
    """Drop the leading ``=``; formulas without one are malformed."""
    if not formula.startswith("="):
        raise MalformedFormula(f"Formula must start with '=': {formula!r}", formula)
    return formula[1:]


def _split(text: str, operators: frozenset[str], drop_whitespace: bool) -> list[str]:
    tokens: list[str] = []
    current: list[str] = []
    for ch in text:
        if ch in operators:
            if current:
                tokens.append("".join(current))
                current = []
            tokens.append(ch)
        elif drop_whitespace and ch.isspace():
            continue
        else:
            current.append(ch)
    if current:
        tokens.append("".join(current))
    elif tokens:
        raise MalformedFormula(f"Trailing operator {tokens[-1]!r} in {text!r}")
    return tokens


def split_additive(text: str) -> list[str]:
    """Split a formula body on ``+``/``-``, discarding whitespace.

    ``"A1 + B1*2"`` -> ``["A1", "+", "B1*2"]``.  Consecutive operators produce
    no empty operand between them, so ``"-5"`` -> ``["-", "5"]``.  An empty
    body yields ``[]``.
    """
    return _split(text, ADDITIVE_OPERATORS, drop_whitespace=True)


def split_multiplicative(operand: str) -> list[str]:
    """Split one additive operand on ``*``/``/``.

    ``"B1*2/C1"`` -> ``["B1", "*", "2", "/", "C1"]``.
    """
    if not operand:
        raise MalformedFormula("Empty operand")
    return _split(operand, MULTIPLICATIVE_OPERATORS, drop_whitespace=False)


def is_operator(token: str) -> bool:
    return token in OPERATORS


def is_numeric_literal(token: str) -> bool:
    """Digits with at most one decimal point (``"12"``, ``"1.5"``, ``".5"``)."""
    return bool(_NUMBER_RE.match(token))


def match_function_call(token: str) -> tuple[str, str, str] | None:
    """If *token* is ``NAME(start..end)``, return ``(NAME, start, end)``.

    The name is upper-cased; endpoints are returned as written.  Anything
    else, including a call without a ``..`` range, returns None.
    """
    m = _CALL_RE.match(token)
    if not m:
        return None
    args = m.group(2)
    start, sep, end = args.partition(RANGE_SEPARATOR)
    if not sep or not start or not end:
        return None
    return m.group(1).upper(), start, end
