"""
Stateful trend indicators.

PSAR carries a trend state (direction, extreme point, acceleration) from
bar to bar, so a correction has to rebuild it from the state as it was
before the corrected bar. Both the candles and the trend state live in
lookbacks for that reason.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from streamind.structures.primitives import Lookback
from streamind.utils.numeric import Number

from .base import Candle, IndicatorSeries, NotEnoughDataError, as_candle


@dataclass(frozen=True)
class _TrendState:
    sar: Number
    extreme: Number | None  # None until the direction is known (first bar)
    acceleration: Number
    falling: bool


@dataclass
class PSAR(IndicatorSeries):
    """
    Parabolic SAR with O(1) updates.

    Algorithm:
    - Bar 0: sar = close, direction unknown
    - Bar 1: falling if both high and low dropped below bar 0, the extreme
      point starts at bar 0's low (falling) or high (rising)
    - Bar 1+: sar = prev_sar + af * (ep - prev_sar), clamped so it never
      penetrates the prior two bars, then checked for reversal
    - New extreme point: af += increment, capped at maximum
    - Reversal: sar = ep, af resets, direction flips

    Stable from the second candle.
    """

    INPUTS = ("high", "low", "close")

    interval: int = field(default=2, init=False)
    acceleration: Any = 0.02
    increment: Any = 0.02
    maximum: Any = 0.2
    _start: Number = field(init=False, repr=False)
    _step: Number = field(init=False, repr=False)
    _cap: Number = field(init=False, repr=False)
    _candles: Lookback = field(init=False, repr=False)
    _states: Lookback = field(init=False, repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._start = self._coerce(self.acceleration)
        self._step = self._coerce(self.increment)
        self._cap = self._coerce(self.maximum)
        if not 0 < self._start <= self._cap:
            raise ValueError(
                f"PSAR: acceleration must be in (0, maximum], got "
                f"acceleration={self.acceleration}, maximum={self.maximum}\n"
                f"\n"
                f"Fix: PSAR(acceleration=0.02, increment=0.02, maximum=0.2)"
            )
        self._candles = Lookback(depth=2)
        self._states = Lookback(depth=1)

    @property
    def label(self) -> str:
        return f"PSAR({self.acceleration},{self.increment},{self.maximum})"

    @property
    def is_falling(self) -> bool | None:
        """Trend direction of the latest bar, None before it is known."""
        state = self._states.current
        if state is None or state.extreme is None:
            return None
        return state.falling

    @property
    def acceleration_factor(self) -> Number | None:
        state = self._states.current
        if state is None or state.extreme is None:
            return None
        return state.acceleration

    def update(self, value: Any, replace: bool = False) -> Number | None:
        candle = self._coerce_candle(value)
        self._advance(replace)

        previous = self._candles.prior(replace, 1)
        before_previous = self._candles.prior(replace, 2)
        state = self._states.prior(replace)
        self._candles.push(candle, replace)

        if previous is None:
            self._states.push(
                _TrendState(sar=candle.close, extreme=None,
                            acceleration=self._start, falling=False),
                replace,
            )
            return None

        state = self._step_state(state, candle, previous, before_previous)
        self._states.push(state, replace)
        return self._publish(state.sar)

    def get_result_from_batch(self, values: Sequence[Any]) -> Number:
        candles = [self._coerce_candle(v) for v in values]
        if len(candles) < self.interval:
            raise NotEnoughDataError(
                f"{self.label} needs {self.interval} candles, got {len(candles)}"
            )
        state = _TrendState(sar=candles[0].close, extreme=None,
                            acceleration=self._start, falling=False)
        for i in range(1, len(candles)):
            before_previous = candles[i - 2] if i > 1 else None
            state = self._step_state(state, candles[i], candles[i - 1], before_previous)
        return state.sar

    def _coerce_candle(self, value: Any) -> Candle:
        candle = as_candle(value)
        return Candle(
            self._coerce(candle.high),
            self._coerce(candle.low),
            self._coerce(candle.close),
        )

    def _step_state(
        self,
        state: _TrendState,
        candle: Candle,
        previous: Candle,
        before_previous: Candle | None,
    ) -> _TrendState:
        falling = state.falling
        extreme = state.extreme
        factor = state.acceleration
        if extreme is None:
            # _falling = (high[1] < high[0]) & (low[1] < low[0])
            falling = candle.high < previous.high and candle.low < previous.low
            extreme = previous.low if falling else previous.high

        sar = state.sar + factor * (extreme - state.sar)
        bars = [previous] if before_previous is None else [previous, before_previous]

        if falling:
            reverse = candle.high > sar
            if candle.low < extreme:
                extreme = candle.low
                factor = min(factor + self._step, self._cap)
            sar = max(sar, *(bar.high for bar in bars))
        else:
            reverse = candle.low < sar
            if candle.high > extreme:
                extreme = candle.high
                factor = min(factor + self._step, self._cap)
            sar = min(sar, *(bar.low for bar in bars))

        if reverse:
            sar = extreme
            factor = self._start
            falling = not falling
            extreme = candle.low if falling else candle.high

        return _TrendState(sar=sar, extreme=extreme, acceleration=factor, falling=falling)
