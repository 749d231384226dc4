"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass

ZERO_DIVISOR_POLICIES = ("substitute", "raise")


@dataclass(frozen=True)
class CalcOptions:
    """Knobs for the places where spreadsheet semantics are a policy choice.

    zero_divisor:
        ``"substitute"`` replaces a zero divisor with ``1.0`` (``=10/0`` is 10);
        ``"raise"`` fails the formula with ``DivisionByZero``.
    skip_non_numeric:
        When False, Text and Empty cells count as ``0.0`` inside aggregates
        (and toward AVER/STDDEV's population size).  When True they are left
        out, so MAX/MIN over a range with no numbers give ``-inf``/``+inf``.
    """

    zero_divisor: str = "substitute"
    skip_non_numeric: bool = False

    def __post_init__(self) -> None:
        if self.zero_divisor not in ZERO_DIVISOR_POLICIES:
            raise ValueError(
                f"zero_divisor must be one of {ZERO_DIVISOR_POLICIES}, "
                f"got {self.zero_divisor!r}"
            )


DEFAULT_OPTIONS = CalcOptions()
