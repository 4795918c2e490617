"""
Numeric backends and pure aggregate functions.

Every indicator is written once and runs over either native floats or
``decimal.Decimal``. The backend converts inputs and constants, and owns
the two operations that round to its configured precision: division
and square root.

The aggregate functions (average, deviations, weighted average,
exponential recursion) are the from-scratch batch computations used by
``get_result_from_batch`` and by windows that recompute every tick.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from decimal import Context, Decimal
from typing import Any, Union

Number = Union[float, Decimal]


class NumericBackend:
    """Base numeric backend: conversion plus precision-sensitive ops."""

    name: str = ""

    def coerce(self, value: Any) -> Number:
        raise NotImplementedError

    def div(self, numerator: Number, denominator: Number) -> Number:
        raise NotImplementedError

    def sqrt(self, value: Number) -> Number:
        raise NotImplementedError

    @property
    def zero(self) -> Number:
        return self.coerce(0)

    @property
    def one(self) -> Number:
        return self.coerce(1)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FloatBackend(NumericBackend):
    """Native binary floating point."""

    name = "float"

    def coerce(self, value: Any) -> float:
        return float(value)

    def div(self, numerator: Number, denominator: Number) -> float:
        return float(numerator) / float(denominator)

    def sqrt(self, value: Number) -> float:
        return math.sqrt(value)


class DecimalBackend(NumericBackend):
    """
    Arbitrary-precision decimal arithmetic.

    Floats are converted through ``repr`` so ``83.61`` becomes exactly
    ``Decimal("83.61")`` rather than its binary approximation.

    ``precision`` governs ``div`` and ``sqrt`` only. Addition, subtraction
    and multiplication in the indicators use the ambient
    ``decimal.getcontext()``, whose default of 28 digits keeps them exact
    for ordinary price data.
    """

    name = "decimal"

    def __init__(self, precision: int = 28) -> None:
        if precision < 1:
            raise ValueError(
                f"precision must be >= 1, got {precision}\n"
                f"\n"
                f"Fix: DecimalBackend(precision=28)"
            )
        self.precision = precision
        self._context = Context(prec=precision)

    def coerce(self, value: Any) -> Decimal:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(value)

    def div(self, numerator: Number, denominator: Number) -> Decimal:
        return self._context.divide(self.coerce(numerator), self.coerce(denominator))

    def sqrt(self, value: Number) -> Decimal:
        return self._context.sqrt(self.coerce(value))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DecimalBackend) and other.precision == self.precision

    def __hash__(self) -> int:
        return hash((self.name, self.precision))

    def __repr__(self) -> str:
        return f"DecimalBackend(precision={self.precision})"


FLOAT = FloatBackend()


def resolve_numeric(numeric: str | NumericBackend | None = None) -> NumericBackend:
    """
    Resolve a backend selector.

    Args:
        numeric: "float", "decimal", a backend instance, or None for the
            configured default (STREAMIND_NUMERIC).

    Raises:
        ValueError: If the name is not a known backend.
    """
    if isinstance(numeric, NumericBackend):
        return numeric
    if numeric is None:
        from streamind.config import get_config

        config = get_config().indicators
        numeric = config.numeric
        precision = config.decimal_precision
    else:
        from streamind.config import get_config

        precision = get_config().indicators.decimal_precision

    name = str(numeric).strip().lower()
    if name == "float":
        return FLOAT
    if name == "decimal":
        return DecimalBackend(precision=precision)
    raise ValueError(
        f"Unknown numeric backend '{numeric}'\n"
        f"\n"
        f"Fix: use numeric='float' or numeric='decimal'"
    )


# =============================================================================
# Batch aggregates
# =============================================================================


def average(values: Sequence[Number], num: NumericBackend = FLOAT) -> Number:
    """Arithmetic mean. Caller guarantees a non-empty sequence."""
    total = num.zero
    for value in values:
        total += value
    return num.div(total, len(values))


def standard_deviation(
    values: Sequence[Number],
    mean: Number | None = None,
    num: NumericBackend = FLOAT,
) -> Number:
    """Population standard deviation (divides by n)."""
    if mean is None:
        mean = average(values, num)
    squares = num.zero
    for value in values:
        squares += (value - mean) * (value - mean)
    return num.sqrt(num.div(squares, len(values)))


def mean_absolute_deviation(
    values: Sequence[Number],
    mean: Number | None = None,
    num: NumericBackend = FLOAT,
) -> Number:
    """Mean of absolute distances from ``mean`` (window mean by default)."""
    if mean is None:
        mean = average(values, num)
    total = num.zero
    for value in values:
        total += abs(value - mean)
    return num.div(total, len(values))


def weighted_average(values: Sequence[Number], num: NumericBackend = FLOAT) -> Number:
    """Linearly weighted mean; the newest value has weight len(values)."""
    total = num.zero
    for weight, value in enumerate(values, start=1):
        total += value * weight
    n = len(values)
    return num.div(total, n * (n + 1) // 2)


def exponential_average(
    values: Iterable[Number],
    weight: Number,
    seed: Number | None = None,
    num: NumericBackend = FLOAT,
) -> Number | None:
    """
    Exponential recursion ``w * x + (1 - w) * prev`` over ``values``.

    Without ``seed`` the first value starts the recursion.
    """
    result = seed
    remainder = num.one - weight
    for value in values:
        if result is None:
            result = value
        else:
            result = value * weight + result * remainder
    return result
