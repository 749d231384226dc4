"""Aggregate functions over cell ranges.

Each builtin takes the range's values already coerced to floats (the
evaluator decides, per :class:`CalcOptions`, whether non-numeric cells are
zeros or left out) and returns a float.
"""

from __future__ import annotations

import math
from typing import Callable

AggregateFunction = Callable[[list[float]], float]

AGGREGATE_FUNCTIONS: dict[str, str] = {
    "SUM": "total of the range",
    "AVER": "arithmetic mean",
    "STDDEV": "population standard deviation",
    "MAX": "largest value",
    "MIN": "smallest value",
}


def is_supported(func_name: str) -> bool:
    """Check if a function name is one of the builtin aggregates."""
    return func_name.upper() in AGGREGATE_FUNCTIONS


# ---------------------------------------------------------------------------
# Builtin implementations
# ---------------------------------------------------------------------------


def _builtin_sum(values: list[float]) -> float:
    total = 0.0
    for v in values:
        total += v
    return total


def _builtin_aver(values: list[float]) -> float:
    if not values:
        return 0.0
    return _builtin_sum(values) / len(values)


def _builtin_stddev(values: list[float]) -> float:
    """Population standard deviation (divides by N, not N-1)."""
    if not values:
        return 0.0
    mean = _builtin_aver(values)
    variance = sum((v - mean) * (v - mean) for v in values) / len(values)
    return math.sqrt(variance)


def _builtin_max(values: list[float]) -> float:
    # -inf seed: a range with no values yields -inf
    result = -math.inf
    for v in values:
        if v > result:
            result = v
    return result


def _builtin_min(values: list[float]) -> float:
    result = math.inf
    for v in values:
        if v < result:
            result = v
    return result


_BUILTINS: dict[str, AggregateFunction] = {
    "SUM": _builtin_sum,
    "AVER": _builtin_aver,
    "STDDEV": _builtin_stddev,
    "MAX": _builtin_max,
    "MIN": _builtin_min,
}


class FunctionRegistry:
    """Registry of aggregate implementations, keyed by upper-case name.

    Starts with the builtins and can be extended with custom aggregates.
    """

    def __init__(self) -> None:
        self._functions: dict[str, AggregateFunction] = dict(_BUILTINS)

    def register(self, name: str, func: AggregateFunction) -> None:
        self._functions[name.upper()] = func

    def get(self, name: str) -> AggregateFunction | None:
        return self._functions.get(name.upper())

    def has(self, name: str) -> bool:
        return name.upper() in self._functions

    @property
    def supported_functions(self) -> frozenset[str]:
        return frozenset(self._functions.keys())
