"""
Result value objects returned by multi-output indicators.

All results are frozen: each stable update produces a fresh instance.
"""

from __future__ import annotations

from dataclasses import dataclass

from streamind.utils.numeric import Number


@dataclass(frozen=True)
class BandsResult:
    """Envelope around a middle line (Bollinger, Acceleration Bands)."""

    lower: Number
    middle: Number
    upper: Number


@dataclass(frozen=True)
class MACDResult:
    macd: Number
    signal: Number
    histogram: Number


@dataclass(frozen=True)
class StochasticResult:
    """%K (fast) and %D (moving average of %K)."""

    k: Number
    d: Number


@dataclass(frozen=True)
class PeriodResult:
    lowest: Number
    highest: Number
