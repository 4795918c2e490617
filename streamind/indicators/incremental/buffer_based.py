"""
Window-recomputing indicators built on ring buffers.

Includes MAD, Bollinger Bands, Bollinger Bands Width, and CCI. Their
aggregates (deviation around the window mean) change for every element
when the mean moves, so they are recomputed over the window on each
stable tick using the same batch functions as get_result_from_batch.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from streamind.structures.primitives import RingBuffer
from streamind.utils.numeric import (
    Number,
    average,
    mean_absolute_deviation,
    standard_deviation,
)

from .base import (
    CompositeIndicator,
    IndicatorSeries,
    NotEnoughDataError,
    as_candle,
    validate_interval,
)
from .moving_average import SMA
from .results import BandsResult


def _push_or_replace(window: RingBuffer, value: Number, replace: bool) -> None:
    if replace and len(window):
        window.replace_last(value)
    else:
        window.push(value)


@dataclass
class MAD(IndicatorSeries):
    """
    Mean Absolute Deviation.

    Formula:
        mad = mean(|x - mean(window)|) over the window
    """

    _window: RingBuffer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._window = RingBuffer(self.interval)

    def update(self, value: Any, replace: bool = False) -> Number | None:
        self._advance(replace)
        _push_or_replace(self._window, self._coerce(value), replace)
        if not self._window.is_full():
            return None
        return self._publish(self._window.mean_absolute_deviation(num=self._num))

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        prices = [self._coerce(v) for v in values]
        if len(prices) < self.interval:
            raise NotEnoughDataError(
                f"{self.label} needs {self.interval} values, got {len(prices)}"
            )
        return mean_absolute_deviation(prices[-self.interval:], num=self._num)


@dataclass
class BollingerBands(IndicatorSeries):
    """
    Bollinger Bands.

    Output:
        middle = mean(window)
        upper = middle + deviation_multiplier * std(window)
        lower = middle - deviation_multiplier * std(window)

    Uses population standard deviation (divides by n).
    """

    OUTPUTS = ("lower", "middle", "upper")

    deviation_multiplier: Any = 2
    _multiplier: Number = field(init=False, repr=False)
    _window: RingBuffer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._multiplier = self._coerce(self.deviation_multiplier)
        self._window = RingBuffer(self.interval)

    def update(self, value: Any, replace: bool = False) -> BandsResult | None:
        self._advance(replace)
        _push_or_replace(self._window, self._coerce(value), replace)
        if not self._window.is_full():
            return None
        return self._publish(self._bands(list(self._window)))

    def get_result_from_batch(self, values: Sequence[Any]) -> BandsResult:
        prices = [self._coerce(v) for v in values]
        if len(prices) < self.interval:
            raise NotEnoughDataError(
                f"{self.label} needs {self.interval} values, got {len(prices)}"
            )
        return self._bands(prices[-self.interval:])

    def _bands(self, prices: list[Number]) -> BandsResult:
        middle = average(prices, self._num)
        offset = standard_deviation(prices, middle, self._num) * self._multiplier
        return BandsResult(lower=middle - offset, middle=middle, upper=middle + offset)


@dataclass
class BollingerBandsWidth(CompositeIndicator):
    """
    Bollinger Bands Width.

    Formula:
        width = (upper - lower) / middle

    Width is 0 when the middle band is 0.
    """

    interval: int
    deviation_multiplier: Any = 2
    _bands: BollingerBands = field(init=False, repr=False)

    def __post_init__(self) -> None:
        validate_interval(type(self).__name__, self.interval)
        super().__post_init__()
        self._bands = BollingerBands(
            self.interval, self.deviation_multiplier, numeric=self._num
        )
        self._log_created()

    def update(self, value: Any, replace: bool = False) -> Number | None:
        bands = self._bands.update(value, replace)
        if bands is None:
            return None
        return self._publish(self._width(bands))

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        return self._width(self._bands.get_result_from_batch(values))

    def _width(self, bands: BandsResult) -> Number:
        if bands.middle == 0:
            return self._num.zero
        return self._num.div(bands.upper - bands.lower, bands.middle)


@dataclass
class CCI(CompositeIndicator):
    """
    Commodity Channel Index.

    Formula:
        tp = (high + low + close) / 3
        mean = sma(tp, interval)
        mean_dev = mean(|tp - mean|) over interval
        cci = (tp - mean) / (0.015 * mean_dev)

    CCI is 0 when the mean deviation is 0.
    """

    INPUTS = ("high", "low", "close")

    interval: int
    _sma: SMA = field(init=False, repr=False)
    _typical: RingBuffer = field(init=False, repr=False)
    _constant: Number = field(init=False, repr=False)

    def __post_init__(self) -> None:
        validate_interval(type(self).__name__, self.interval)
        super().__post_init__()
        self._sma = SMA(self.interval, numeric=self._num)
        self._typical = RingBuffer(self.interval)
        self._constant = self._coerce("0.015")
        self._log_created()

    def update(self, value: Any, replace: bool = False) -> Number | None:
        typical = self._typical_price(value)
        mean = self._sma.update(typical, replace)
        _push_or_replace(self._typical, typical, replace)
        if mean is None:
            return None
        deviation = self._typical.mean_absolute_deviation(mean, self._num)
        return self._publish(self._index(typical, mean, deviation))

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        if len(values) < self.interval:
            raise NotEnoughDataError(
                f"{self.label} needs {self.interval} candles, got {len(values)}"
            )
        typical = [self._typical_price(v) for v in values[-self.interval:]]
        mean = average(typical, self._num)
        deviation = mean_absolute_deviation(typical, mean, self._num)
        return self._index(typical[-1], mean, deviation)

    def _typical_price(self, value: Any) -> Number:
        candle = as_candle(value)
        total = (
            self._coerce(candle.high)
            + self._coerce(candle.low)
            + self._coerce(candle.close)
        )
        return self._num.div(total, 3)

    def _index(self, typical: Number, mean: Number, deviation: Number) -> Number:
        if deviation == 0:
            return self._num.zero
        return self._num.div(typical - mean, self._constant * deviation)
