"""
Lookback-based indicators tracking lowest/highest values over a window.

Includes Period and the Stochastic Oscillator.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from streamind.structures.primitives import MonotonicDeque, RingBuffer
from streamind.utils.numeric import Number

from .base import CompositeIndicator, IndicatorSeries, NotEnoughDataError, as_candle, validate_interval
from .moving_average import MovingAverage, create_moving_average
from .results import PeriodResult, StochasticResult


@dataclass
class Period(IndicatorSeries):
    """
    Lowest and highest value over the last `interval` ticks.

    Amortized O(1) via a pair of monotonic deques:
        - min deque: increasing values, front is the lowest
        - max deque: decreasing values, front is the highest
    """

    OUTPUTS = ("lowest", "highest")

    _lowest: MonotonicDeque = field(init=False, repr=False)
    _highest: MonotonicDeque = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._lowest = MonotonicDeque(self.interval, "min")
        self._highest = MonotonicDeque(self.interval, "max")

    def update(self, value: Any, replace: bool = False) -> PeriodResult | None:
        price = self._coerce(value)
        self._advance(replace)

        if replace and len(self._lowest):
            self._lowest.replace_last(price)
            self._highest.replace_last(price)
        else:
            idx = self._count - 1
            self._lowest.push(idx, price)
            self._highest.push(idx, price)

        if self._count < self.interval:
            return None
        return self._publish(
            PeriodResult(lowest=self._lowest.get(), highest=self._highest.get())
        )

    @property
    def lowest(self) -> Number | None:
        return self._result.lowest if self._result is not None else None

    @property
    def highest(self) -> Number | None:
        return self._result.highest if self._result is not None else None

    def get_result_from_batch(self, values: Sequence[Any]) -> PeriodResult:
        prices = [self._coerce(v) for v in values]
        if len(prices) < self.interval:
            raise NotEnoughDataError(
                f"{self.label} needs {self.interval} values, got {len(prices)}"
            )
        window = prices[-self.interval:]
        return PeriodResult(lowest=min(window), highest=max(window))


@dataclass
class StochasticOscillator(CompositeIndicator):
    """
    Stochastic Oscillator.

    Formula:
        lowest_low = min(low over k_period)
        highest_high = max(high over k_period)
        %K = (close - lowest_low) / (highest_high - lowest_low) * 100
        %D = moving_average(%K, d_period)

    %K is 0 when the window has no range. Emits once %D is stable.
    """

    INPUTS = ("high", "low", "close")
    OUTPUTS = ("k", "d")

    k_period: int
    d_period: int
    smoothing: Any = None
    _highs: RingBuffer = field(init=False, repr=False)
    _lows: RingBuffer = field(init=False, repr=False)
    _d: MovingAverage = field(init=False, repr=False)

    def __post_init__(self) -> None:
        validate_interval(type(self).__name__, self.k_period, "k_period")
        validate_interval(type(self).__name__, self.d_period, "d_period")
        super().__post_init__()
        self._highs = RingBuffer(self.k_period)
        self._lows = RingBuffer(self.k_period)
        self._d = create_moving_average(self.smoothing, self.d_period, self._num)
        self._log_created()

    @property
    def interval(self) -> int:
        """
        The %K window.

        The first result needs more ticks than this: %D only starts once
        %K has a full window, so with SMA smoothing the oscillator is stable
        after ``warmup`` = k_period + d_period - 1 ticks.
        """
        return self.k_period

    @property
    def warmup(self) -> int:
        """Ticks until the first result, for averages stable after d_period values (all but DEMA)."""
        return self.k_period + self.d_period - 1

    @property
    def label(self) -> str:
        return f"StochasticOscillator({self.k_period},{self.d_period})"

    def update(self, value: Any, replace: bool = False) -> StochasticResult | None:
        candle = as_candle(value)
        high = self._coerce(candle.high)
        low = self._coerce(candle.low)
        close = self._coerce(candle.close)

        if replace and len(self._highs):
            self._highs.replace_last(high)
            self._lows.replace_last(low)
        else:
            self._highs.push(high)
            self._lows.push(low)

        if not self._highs.is_full():
            return None

        lowest = self._lows.min()
        divisor = self._highs.max() - lowest
        if divisor == 0:
            fast_k = self._num.zero
        else:
            fast_k = self._num.div((close - lowest) * 100, divisor)

        d = self._d.update(fast_k, replace)
        if d is None:
            return None
        return self._publish(StochasticResult(k=fast_k, d=d))
