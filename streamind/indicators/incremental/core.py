"""
Core compound indicators: MACD, ATR, and Acceleration Bands.

Each owns its moving averages outright, feeds them in a fixed order with
the caller's replace flag, and publishes only once every average it reads
on the tick has a value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from streamind.utils.numeric import Number

from .base import CompositeIndicator, as_candle, validate_interval
from .moving_average import MovingAverage, MovingAverageType, create_moving_average
from .results import BandsResult, MACDResult
from .trivial import TR


@dataclass
class MACD(CompositeIndicator):
    """
    Moving Average Convergence Divergence.

    Components:
        macd_line = short_average - long_average
        signal = average(macd_line, signal_interval)
        histogram = macd_line - signal

    The signal average is fed from the tick the long average becomes
    stable, and its running value is reported from that same tick, so
    macd, signal and histogram always appear together.
    """

    OUTPUTS = ("macd", "signal", "histogram")

    short_interval: int = 12
    long_interval: int = 26
    signal_interval: int = 9
    smoothing: Any = MovingAverageType.EMA
    _short: MovingAverage = field(init=False, repr=False)
    _long: MovingAverage = field(init=False, repr=False)
    _signal: MovingAverage = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("short_interval", "long_interval", "signal_interval"):
            validate_interval(type(self).__name__, getattr(self, name), name)
        super().__post_init__()
        self._short = create_moving_average(self.smoothing, self.short_interval, self._num)
        self._long = create_moving_average(self.smoothing, self.long_interval, self._num)
        self._signal = create_moving_average(self.smoothing, self.signal_interval, self._num)
        self._log_created()

    @property
    def interval(self) -> int:
        return self.long_interval

    @property
    def label(self) -> str:
        return f"MACD({self.short_interval},{self.long_interval},{self.signal_interval})"

    def update(self, value: Any, replace: bool = False) -> MACDResult | None:
        price = self._coerce(value)
        short = self._short.update(price, replace)
        long = self._long.update(price, replace)
        if short is None or long is None:
            return None

        macd = short - long
        self._signal.update(macd, replace)
        signal = self._signal.latest
        if signal is None:
            return None

        return self._publish(MACDResult(macd=macd, signal=signal, histogram=macd - signal))


@dataclass
class ATR(CompositeIndicator):
    """
    Average True Range.

    Formula:
        atr = average(true_range, interval)

    Wilder's smoothing (RMA) by default; any moving average can be selected.
    """

    INPUTS = ("high", "low", "close")

    interval: int = 14
    smoothing: Any = MovingAverageType.RMA
    _tr: TR = field(init=False, repr=False)
    _average: MovingAverage = field(init=False, repr=False)

    def __post_init__(self) -> None:
        validate_interval(type(self).__name__, self.interval)
        super().__post_init__()
        self._tr = TR(numeric=self._num)
        self._average = create_moving_average(self.smoothing, self.interval, self._num)
        self._log_created()

    def update(self, value: Any, replace: bool = False) -> Number | None:
        true_range = self._tr.update(value, replace)
        average = self._average.update(true_range, replace)
        if average is None:
            return None
        return self._publish(average)


@dataclass
class AccelerationBands(CompositeIndicator):
    """
    Acceleration Bands.

    Formula:
        coef = (high - low) / (high + low) * width     (0 when high + low == 0)
        lower = average(low * (1 - coef), interval)
        middle = average(close, interval)
        upper = average(high * (1 + coef), interval)

    One owned average per band, all of the selected type.
    """

    INPUTS = ("high", "low", "close")
    OUTPUTS = ("lower", "middle", "upper")

    interval: int
    width: Any = 4
    smoothing: Any = None
    _width: Number = field(init=False, repr=False)
    _lower: MovingAverage = field(init=False, repr=False)
    _middle: MovingAverage = field(init=False, repr=False)
    _upper: MovingAverage = field(init=False, repr=False)

    def __post_init__(self) -> None:
        validate_interval(type(self).__name__, self.interval)
        super().__post_init__()
        self._width = self._coerce(self.width)
        self._lower = create_moving_average(self.smoothing, self.interval, self._num)
        self._middle = create_moving_average(self.smoothing, self.interval, self._num)
        self._upper = create_moving_average(self.smoothing, self.interval, self._num)
        self._log_created()

    def coefficient(self, high: Any, low: Any) -> Number:
        """Band distance factor for one candle."""
        high = self._coerce(high)
        low = self._coerce(low)
        high_plus_low = high + low
        if high_plus_low == 0:
            return self._num.zero
        return self._num.div(high - low, high_plus_low) * self._width

    def update(self, value: Any, replace: bool = False) -> BandsResult | None:
        candle = as_candle(value)
        high = self._coerce(candle.high)
        low = self._coerce(candle.low)
        close = self._coerce(candle.close)
        coefficient = self.coefficient(high, low)
        one = self._num.one

        self._lower.update(low * (one - coefficient), replace)
        self._middle.update(close, replace)
        self._upper.update(high * (one + coefficient), replace)

        if not self._all_stable(self._lower, self._middle, self._upper):
            return None
        return self._publish(BandsResult(
            lower=self._lower.get_result(),
            middle=self._middle.get_result(),
            upper=self._upper.get_result(),
        ))
