"""
Base classes and shared types for incremental indicators.

All incremental indicators inherit from IncrementalIndicator, which defines
the per-tick interface: update(value, replace), get_result(), is_stable.

Two-tier result contract:
- update() returns the new result, or None while warming up. It never
  raises for valid input.
- get_result() raises NotEnoughDataError while no result exists.

Replace protocol:
- update(x, replace=True) corrects the most recent tick. State derived
  from the superseded value is unwound and the tick is re-applied with x,
  so update(a); update(b, replace=True) ends in the same state as update(b).
- Compound indicators pass the same replace flag to every child.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from streamind.utils.numeric import Number, NumericBackend, resolve_numeric

logger = logging.getLogger(__name__)


class NotEnoughDataError(Exception):
    """Raised by get_result() before an indicator has produced a result."""


@dataclass(frozen=True, slots=True)
class Candle:
    """
    Single high/low/close observation.

    Example:
        >>> candle = Candle(high=83.9, low=83.11, close=83.15)
        >>> candle.close
        83.15
    """

    high: Any
    low: Any
    close: Any


def as_candle(observation: Any) -> Candle:
    """Accept a Candle, a mapping, or any object with high/low/close attributes."""
    if isinstance(observation, Candle):
        return observation
    if isinstance(observation, Mapping):
        return Candle(observation["high"], observation["low"], observation["close"])
    return Candle(observation.high, observation.low, observation.close)


def validate_interval(owner: str, interval: Any, name: str = "interval") -> None:
    """Fail fast on a non-positive or non-integer window length."""
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        raise ValueError(
            f"{owner}: {name} must be a positive integer, got {interval!r}\n"
            f"\n"
            f"Fix: {owner}({name}=14)"
        )


class IncrementalIndicator(ABC):
    """
    Base class for incremental indicators.

    Every indicator exposes ``interval``, the window length that bounds its
    warm-up, either as a constructor field or as a property.
    """

    INPUTS: ClassVar[tuple[str, ...]] = ("close",)
    # Result fields of multi-output indicators; empty for scalar results
    OUTPUTS: ClassVar[tuple[str, ...]] = ()

    interval: int
    _result: Any = None

    @abstractmethod
    def update(self, value: Any, replace: bool = False) -> Any | None:
        """Apply one tick; returns the result or None while unstable."""
        ...

    def replace(self, value: Any) -> Any | None:
        """Correct the most recent tick."""
        return self.update(value, replace=True)

    def updates(self, values: Iterable[Any]) -> Any | None:
        """Apply update() to each value in order; returns the last return value."""
        result = None
        for value in values:
            result = self.update(value)
        return result

    def get_result(self) -> Any:
        if self._result is None:
            raise NotEnoughDataError(
                f"{self.label} has no result yet{self._warmup_hint()}"
            )
        return self._result

    @property
    def is_stable(self) -> bool:
        return self._result is not None

    @property
    def value(self) -> Any | None:
        """Latest result, or None while unstable."""
        return self._result

    @property
    def label(self) -> str:
        return f"{type(self).__name__}({self.interval})"

    def reset(self) -> None:
        """Reset state to initial, keeping the construction parameters."""
        params = {f.name: getattr(self, f.name) for f in fields(self) if f.init}
        # __init__ skips init=False fields with plain defaults, so take every
        # field from a fresh instance
        fresh = type(self)(**params)
        self.__dict__.update(fresh.__dict__)

    def _warmup_hint(self) -> str:
        return ""

    def _publish(self, result: Any) -> Any:
        if self._result is None:
            logger.debug("[STABLE] | indicator=%s", self.label)
        self._result = result
        return result


@dataclass
class IndicatorSeries(IncrementalIndicator):
    """
    Leaf indicator state: fixed interval, tick counter, last result.

    Stable once ``interval`` ticks have been applied. Replace calls do not
    advance the counter, so stability is monotonic.
    """

    interval: int
    numeric: str | NumericBackend | None = field(default=None, kw_only=True)
    _num: NumericBackend = field(init=False, repr=False, compare=False)
    _count: int = field(default=0, init=False)
    _result: Any = field(default=None, init=False)

    def __post_init__(self) -> None:
        validate_interval(type(self).__name__, self.interval)
        self._num = resolve_numeric(self.numeric)

    @property
    def ticks(self) -> int:
        """Number of distinct ticks applied (corrections excluded)."""
        return self._count

    def _advance(self, replace: bool) -> None:
        if not replace or self._count == 0:
            self._count += 1

    def _coerce(self, value: Any) -> Number:
        return self._num.coerce(value)

    def _warmup_hint(self) -> str:
        remaining = self.interval - self._count
        if remaining > 0:
            return f" ({remaining} more tick(s) needed)"
        return ""


@dataclass
class CompositeIndicator(IncrementalIndicator):
    """
    Indicator built from exclusively owned child indicators.

    Subclasses create their children in __post_init__ (after calling
    super().__post_init__()), feed them in a fixed order with the same
    replace flag, and publish only when every child consulted for the
    tick is stable.
    """

    numeric: str | NumericBackend | None = field(default=None, kw_only=True)
    _num: NumericBackend = field(init=False, repr=False, compare=False)
    _result: Any = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._num = resolve_numeric(self.numeric)

    def _coerce(self, value: Any) -> Number:
        return self._num.coerce(value)

    @staticmethod
    def _all_stable(*children: IncrementalIndicator) -> bool:
        return all(child.is_stable for child in children)

    def _log_created(self) -> None:
        logger.debug("[CREATED] | indicator=%s | numeric=%s", self.label, self._num.name)
