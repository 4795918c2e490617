"""
Interchangeable incremental moving averages.

Every average satisfies the same contract (update / replace / get_result /
is_stable / interval / latest / get_result_from_batch), so compound
indicators take a moving-average selector instead of a hardcoded formula:

    bands = AccelerationBands(20, 4, smoothing="ema")
    bands = AccelerationBands(20, 4, smoothing=MovingAverageType.WMA)
    bands = AccelerationBands(20, 4, smoothing=DEMA)

``latest`` is the running value, which exponential averages have from
the first tick on, before they are stable.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from streamind.structures.primitives import Lookback, RingBuffer
from streamind.utils.numeric import (
    Number,
    NumericBackend,
    average,
    exponential_average,
    weighted_average,
)

from .base import IndicatorSeries, NotEnoughDataError


@dataclass
class MovingAverage(IndicatorSeries):
    """Base contract shared by all incremental averages."""

    @property
    def latest(self) -> Number | None:
        """Running value, possibly before the average is stable."""
        return self._result

    @abstractmethod
    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        """Result a fresh instance would report after updating with ``values``."""
        ...

    def _batch_prices(self, values: Sequence[Any]) -> list[Number]:
        prices = [self._coerce(v) for v in values]
        if len(prices) < self.interval:
            raise NotEnoughDataError(
                f"{self.label} needs {self.interval} values, got {len(prices)}"
            )
        return prices


@dataclass
class SMA(MovingAverage):
    """
    Simple Moving Average over a ring buffer.

    The mean is summed from the window on each stable tick, so the result
    depends only on the window contents, never on the order of pushes,
    evictions and corrections that produced it.
    """

    _window: RingBuffer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._window = RingBuffer(self.interval)

    def update(self, value: Any, replace: bool = False) -> Number | None:
        price = self._coerce(value)
        self._advance(replace)

        if replace and len(self._window):
            self._window.replace_last(price)
        else:
            self._window.push(price)

        if not self._window.is_full():
            return None
        return self._publish(average(list(self._window), self._num))

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        prices = self._batch_prices(values)
        return average(prices[-self.interval:], self._num)


@dataclass
class WMA(MovingAverage):
    """
    Weighted Moving Average.

    Formula:
        wma = sum(weight[i] * x[i]) / (n * (n + 1) / 2)
        where weight[i] = i + 1 (newest value has the highest weight)

    Recomputed over the window on each stable tick.
    """

    _window: RingBuffer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._window = RingBuffer(self.interval)

    def update(self, value: Any, replace: bool = False) -> Number | None:
        price = self._coerce(value)
        self._advance(replace)

        if replace and len(self._window):
            self._window.replace_last(price)
        else:
            self._window.push(price)

        if not self._window.is_full():
            return None
        return self._publish(weighted_average(list(self._window), self._num))

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        prices = self._batch_prices(values)
        return weighted_average(prices[-self.interval:], self._num)


@dataclass
class _ExponentialAverage(MovingAverage):
    """
    Shared recursion for EMA and RMA.

        value = weight * price + (1 - weight) * previous_value

    presma=False -> first tick seeds the running value with the price
    presma=True  -> running value starts as SMA(first `interval` prices)

    The value before the current tick is kept in a depth-1 lookback, so a
    correction recomputes from it instead of from the superseded value.
    """

    presma: bool = False
    _weight: Number = field(init=False, repr=False)
    _remainder: Number = field(init=False, repr=False)
    _values: Lookback = field(init=False, repr=False)
    _seed: SMA | None = field(default=None, init=False, repr=False)

    @abstractmethod
    def _weight_for(self, interval: int) -> Number:
        ...

    def __post_init__(self) -> None:
        super().__post_init__()
        self._weight = self._weight_for(self.interval)
        self._remainder = self._num.one - self._weight
        self._values = Lookback(depth=1)
        if self.presma:
            self._seed = SMA(self.interval, numeric=self._num)

    @property
    def weight_factor(self) -> Number:
        """Smoothing weight, fixed at construction."""
        return self._weight

    @property
    def latest(self) -> Number | None:
        return self._values.current

    def update(self, value: Any, replace: bool = False) -> Number | None:
        price = self._coerce(value)
        self._advance(replace)

        if self._seed is not None and self._count <= self.interval:
            running = self._seed.update(price, replace)
        else:
            prior = self._values.prior(replace)
            if prior is None:
                running = price
            else:
                running = price * self._weight + prior * self._remainder
        self._values.push(running, replace)

        if self._count < self.interval:
            return None
        return self._publish(running)

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        prices = self._batch_prices(values)
        if self.presma:
            seed = average(prices[:self.interval], self._num)
            return exponential_average(
                prices[self.interval:], self._weight, seed=seed, num=self._num
            )
        return exponential_average(prices, self._weight, num=self._num)


@dataclass
class EMA(_ExponentialAverage):
    """
    Exponential Moving Average.

    Formula:
        weight = 2 / (interval + 1)
        ema = weight * price + (1 - weight) * ema_prev

    Stable after `interval` ticks.
    """

    def _weight_for(self, interval: int) -> Number:
        return self._num.div(2, interval + 1)


@dataclass
class RMA(_ExponentialAverage):
    """
    Wilder's smoothed moving average (WSMA).

    Formula:
        weight = 1 / interval
        rma = (rma_prev * (interval - 1) + price) / interval

    Seeded with the simple average of the first `interval` prices.
    """

    presma: bool = True

    def _weight_for(self, interval: int) -> Number:
        return self._num.div(1, interval)


WSMA = RMA


@dataclass
class DEMA(MovingAverage):
    """
    Double Exponential Moving Average.

    Formula:
        dema = 2 * ema(price) - ema(ema(price))

    Composed from two owned EMAs that receive every tick (and every
    correction) in order: inner first, then outer fed with the inner
    running value.
    """

    _inner: EMA = field(init=False, repr=False)
    _outer: EMA = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._inner = EMA(self.interval, numeric=self._num)
        self._outer = EMA(self.interval, numeric=self._num)

    @property
    def latest(self) -> Number | None:
        inner, outer = self._inner.latest, self._outer.latest
        if inner is None or outer is None:
            return None
        return inner * 2 - outer

    def update(self, value: Any, replace: bool = False) -> Number | None:
        self._advance(replace)
        self._inner.update(value, replace)
        self._outer.update(self._inner.latest, replace)

        if not self._outer.is_stable:
            return None
        return self._publish(self.latest)

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        prices = self._batch_prices(values)
        weight = self._inner.weight_factor
        remainder = self._num.one - weight
        inner_values: list[Number] = []
        running: Number | None = None
        for price in prices:
            running = price if running is None else price * weight + running * remainder
            inner_values.append(running)
        outer = exponential_average(inner_values, weight, num=self._num)
        return inner_values[-1] * 2 - outer


# =============================================================================
# Moving-average selection
# =============================================================================


class MovingAverageType(str, Enum):
    SMA = "sma"
    EMA = "ema"
    RMA = "rma"
    WSMA = "wsma"
    WMA = "wma"
    DEMA = "dema"


_MOVING_AVERAGES: dict[MovingAverageType, type[MovingAverage]] = {
    MovingAverageType.SMA: SMA,
    MovingAverageType.EMA: EMA,
    MovingAverageType.RMA: RMA,
    MovingAverageType.WSMA: RMA,
    MovingAverageType.WMA: WMA,
    MovingAverageType.DEMA: DEMA,
}


def resolve_moving_average(selector: Any = None) -> type[MovingAverage]:
    """
    Resolve a moving-average selector to its class.

    Args:
        selector: A MovingAverage subclass, a MovingAverageType, its string
            value ("sma", "ema", ...), or None for the configured default
            (STREAMIND_MOVING_AVERAGE).

    Raises:
        ValueError: If the selector names no known average.
    """
    if isinstance(selector, type) and issubclass(selector, MovingAverage):
        return selector
    if selector is None:
        from streamind.config import get_config

        selector = get_config().indicators.moving_average
    try:
        kind = MovingAverageType(str(getattr(selector, "value", selector)).lower())
    except ValueError:
        valid = ", ".join(t.value for t in MovingAverageType)
        raise ValueError(
            f"Unknown moving average '{selector}'. Valid: {valid}\n"
            f"\n"
            f"Fix: smoothing='ema' or smoothing=MovingAverageType.EMA"
        ) from None
    return _MOVING_AVERAGES[kind]


def create_moving_average(
    selector: Any,
    interval: int,
    numeric: str | NumericBackend | None = None,
) -> MovingAverage:
    """Instantiate the selected average with its own window."""
    return resolve_moving_average(selector)(interval, numeric=numeric)
