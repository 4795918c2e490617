"""
Trivial incremental indicators: single-bar formulas with a one-bar lookback.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from streamind.structures.primitives import Lookback
from streamind.utils.numeric import Number

from .base import Candle, IndicatorSeries, NotEnoughDataError, as_candle


@dataclass
class TR(IndicatorSeries):
    """
    True Range.

    Formula:
        tr = max(high - low, |high - prev_close|, |low - prev_close|)
        first bar: tr = high - low

    The previous candle lives in a depth-1 lookback: a correction of the
    current candle measures against the same previous close.
    """

    INPUTS = ("high", "low", "close")

    interval: int = 1
    _candles: Lookback = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._candles = Lookback(depth=1)

    def update(self, value: Any, replace: bool = False) -> Number:
        candle = self._coerce_candle(value)
        self._advance(replace)
        previous = self._candles.prior(replace)
        self._candles.push(candle, replace)
        return self._publish(self._true_range(candle, previous))

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        if not values:
            raise NotEnoughDataError(f"{self.label} needs at least one candle")
        candle = self._coerce_candle(values[-1])
        previous = self._coerce_candle(values[-2]) if len(values) > 1 else None
        return self._true_range(candle, previous)

    def _coerce_candle(self, value: Any) -> Candle:
        candle = as_candle(value)
        return Candle(
            self._coerce(candle.high),
            self._coerce(candle.low),
            self._coerce(candle.close),
        )

    @staticmethod
    def _true_range(candle: Candle, previous: Candle | None) -> Number:
        high_low = candle.high - candle.low
        if previous is None:
            return high_low
        return max(
            high_low,
            abs(candle.high - previous.close),
            abs(candle.low - previous.close),
        )
