"""
Windowed state for streaming indicators.

- RingBuffer: the last N observations in arrival order, with aggregates
- MonotonicDeque: running min or max of the last N observations
- Lookback: the newest tick and up to two ticks before it

Each one can correct its newest entry in place, which is what the replace
protocol of the indicators is built on.

Costs per tick:
- RingBuffer.push() / replace_last(): O(1)
- RingBuffer aggregates (min, max, mean, ...): O(N)
- MonotonicDeque.push() / replace_last(): O(1) amortized, get(): O(1)
- Lookback.push() / prior(): O(1)
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Any, Generic, Literal, TypeVar

import numpy as np

from streamind.utils.numeric import (
    FLOAT,
    Number,
    NumericBackend,
    average,
    mean_absolute_deviation,
    standard_deviation,
)

T = TypeVar("T")


class RingBuffer:
    """
    The most recent ``size`` observations, oldest first.

    Storage is a preallocated list with a moving write cursor, so a push
    into a full window overwrites the oldest slot instead of shifting.

    Example:
        >>> window = RingBuffer(size=3)
        >>> for price in (1.0, 2.0, 3.0):
        ...     window.push(price)
        >>> window.is_full()
        True
        >>> window.push(4.0)  # returns what fell out
        1.0
        >>> window[0]
        2.0
        >>> window.replace_last(5.0)
        4.0
        >>> list(window)
        [2.0, 3.0, 5.0]

    Aggregates on an empty buffer return None.
    """

    __slots__ = ("size", "_slots", "_cursor", "_filled")

    def __init__(self, size: int) -> None:
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ValueError(
                f"RingBuffer size must be a positive integer, got {size!r}\n"
                f"\n"
                f"Fix: RingBuffer(size=5)"
            )
        self.size = size
        self._slots: list[Any] = [None] * size
        self._cursor = 0  # slot the next push writes to
        self._filled = 0

    def push(self, value: Any) -> Any | None:
        """Append ``value``; returns the observation it displaced, if any."""
        displaced = self._slots[self._cursor] if self._filled == self.size else None
        self._slots[self._cursor] = value
        self._cursor = (self._cursor + 1) % self.size
        self._filled = min(self._filled + 1, self.size)
        return displaced

    def replace_last(self, value: Any) -> Any:
        """
        Swap the newest observation for ``value`` and return the old one.

        Observations displaced by earlier pushes are not brought back.

        Raises:
            IndexError: If nothing has been pushed.
        """
        if not self._filled:
            raise IndexError("replace_last() on an empty RingBuffer")
        newest = (self._cursor - 1) % self.size
        old, self._slots[newest] = self._slots[newest], value
        return old

    def __getitem__(self, idx: int) -> Any:
        """Observation by age: 0 is the oldest, -1 the newest."""
        pos = idx + self._filled if idx < 0 else idx
        if not 0 <= pos < self._filled:
            raise IndexError(
                f"RingBuffer index {idx} out of range for {self._filled} observation(s)"
            )
        return self._slots[(self._cursor - self._filled + pos) % self.size]

    def __iter__(self) -> Iterator[Any]:
        first = self._cursor - self._filled
        for offset in range(self._filled):
            yield self._slots[(first + offset) % self.size]

    def __len__(self) -> int:
        return self._filled

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RingBuffer):
            return NotImplemented
        return self.size == other.size and list(self) == list(other)

    def __repr__(self) -> str:
        return f"RingBuffer(size={self.size}, values={list(self)!r})"

    def is_full(self) -> bool:
        """True once ``size`` observations have been pushed."""
        return self._filled == self.size

    @property
    def newest(self) -> Any | None:
        return self[-1] if self._filled else None

    def clear(self) -> None:
        self._slots = [None] * self.size
        self._cursor = 0
        self._filled = 0

    # -------------------------------------------------------------------------
    # Aggregates over the current contents
    # -------------------------------------------------------------------------

    def min(self) -> Any | None:
        return min(self) if self._filled else None

    def max(self) -> Any | None:
        return max(self) if self._filled else None

    def mean(self, num: NumericBackend = FLOAT) -> Number | None:
        return average(list(self), num) if self._filled else None

    def standard_deviation(
        self, mean: Number | None = None, num: NumericBackend = FLOAT
    ) -> Number | None:
        """Population standard deviation of the contents."""
        return standard_deviation(list(self), mean, num) if self._filled else None

    def mean_absolute_deviation(
        self, mean: Number | None = None, num: NumericBackend = FLOAT
    ) -> Number | None:
        return mean_absolute_deviation(list(self), mean, num) if self._filled else None

    def to_array(self) -> np.ndarray:
        """Contents as a float64 array, oldest first (length = len(self))."""
        return np.fromiter((float(v) for v in self), dtype=np.float64, count=self._filled)


class MonotonicDeque:
    """
    Running min (mode="min") or max (mode="max") of the last
    ``window_size`` indexed observations.

    Entries are (idx, value) pairs kept sorted by value: ascending for
    min, descending for max. A push drops every entry it dominates from
    the back and every entry older than the window from the front, so the
    front is always the answer.

    The entries one push removed are remembered until the next push;
    ``replace_last`` puts them back and pushes the corrected value under
    the same index.

    Example:
        >>> lows = MonotonicDeque(window_size=3, mode="min")
        >>> lows.push(0, 5.0)
        >>> lows.push(1, 3.0)  # 5.0 dominated
        >>> lows.push(2, 4.0)
        >>> lows.get()
        3.0
        >>> lows.replace_last(2.0)  # idx 2 corrected, 3.0 and 4.0 gone
        >>> lows.get()
        2.0
        >>> lows.replace_last(4.0)  # 3.0 restored
        >>> lows.get()
        3.0
    """

    __slots__ = ("window_size", "mode", "_entries", "_undo")

    def __init__(self, window_size: int, mode: Literal["min", "max"]) -> None:
        if isinstance(window_size, bool) or not isinstance(window_size, int) or window_size < 1:
            raise ValueError(
                f"MonotonicDeque window_size must be a positive integer, got {window_size!r}\n"
                f"\n"
                f"Fix: MonotonicDeque(window_size=14, mode='min')"
            )
        if mode not in ("min", "max"):
            raise ValueError(
                f"MonotonicDeque mode must be 'min' or 'max', got {mode!r}\n"
                f"\n"
                f"Fix: MonotonicDeque(window_size=14, mode='max')"
            )
        self.window_size = window_size
        self.mode = mode
        self._entries: deque[tuple[int, Any]] = deque()
        # (idx, expired from front, dominated at back) of the last push
        self._undo: tuple[int, list[tuple[int, Any]], list[tuple[int, Any]]] | None = None

    def _dominates(self, value: Any, other: Any) -> bool:
        return value <= other if self.mode == "min" else value >= other

    def push(self, idx: int, value: Any) -> None:
        """Add ``value`` observed at ``idx``; indices must increase by call."""
        expired: list[tuple[int, Any]] = []
        oldest_kept = idx - self.window_size + 1
        while self._entries and self._entries[0][0] < oldest_kept:
            expired.append(self._entries.popleft())

        dominated: list[tuple[int, Any]] = []
        while self._entries and self._dominates(value, self._entries[-1][1]):
            dominated.append(self._entries.pop())

        self._entries.append((idx, value))
        self._undo = (idx, expired, dominated)

    def replace_last(self, value: Any) -> None:
        """
        Correct the value of the most recent push.

        Raises:
            ValueError: If nothing has been pushed yet.
        """
        if self._undo is None:
            raise ValueError(
                "replace_last() before any push\n"
                "\n"
                "Fix: push(idx, value) the first observation"
            )
        idx, expired, dominated = self._undo
        self._entries.pop()
        self._entries.extend(reversed(dominated))
        self._entries.extendleft(reversed(expired))
        self.push(idx, value)

    def get(self) -> Any | None:
        """Current min/max, or None before the first push."""
        return self._entries[0][1] if self._entries else None

    def get_or_raise(self) -> Any:
        """
        Current min/max.

        Raises:
            ValueError: If nothing has been pushed.
        """
        if not self._entries:
            raise ValueError(
                f"MonotonicDeque(window_size={self.window_size}, mode={self.mode!r}) "
                f"is empty: push a value before reading it"
            )
        return self._entries[0][1]

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MonotonicDeque):
            return NotImplemented
        return (
            self.window_size == other.window_size
            and self.mode == other.mode
            and list(self._entries) == list(other._entries)
        )

    def __repr__(self) -> str:
        return (
            f"MonotonicDeque(window_size={self.window_size}, mode={self.mode!r}, "
            f"entries={list(self._entries)!r})"
        )

    def clear(self) -> None:
        self._entries.clear()
        self._undo = None


class Lookback(Generic[T]):
    """
    Bounded history of the newest tick plus ``depth`` ticks before it.

    Slots are named from the newest: ``current``, ``previous``,
    ``two_previous``. A regular push shifts every slot back by one and
    discards the oldest. A replace push overwrites ``current`` only, so
    the slots before the corrected tick are never touched, and any number
    of consecutive replaces recompute from the same prior state.

    Example:
        >>> hist = Lookback(depth=1)
        >>> hist.push(10.0)
        >>> hist.push(11.0)
        >>> hist.prior(replace=False)  # state a new tick builds on
        11.0
        >>> hist.prior(replace=True)   # state a correction builds on
        10.0
        >>> hist.push(12.0, replace=True)
        >>> (hist.previous, hist.current)
        (10.0, 12.0)
    """

    MAX_DEPTH = 2

    __slots__ = ("depth", "_slots")

    def __init__(self, depth: int = 1) -> None:
        if not isinstance(depth, int) or not 1 <= depth <= self.MAX_DEPTH:
            raise ValueError(
                f"depth must be 1 or 2, got {depth!r}\n"
                f"\n"
                f"Fix: Lookback(depth=1)"
            )
        self.depth = depth
        self._slots: deque[T] = deque(maxlen=depth + 1)

    def push(self, value: T, replace: bool = False) -> None:
        """Record ``value`` as a new tick, or as a correction of the current one."""
        if replace and self._slots:
            self._slots[-1] = value
        else:
            self._slots.append(value)

    def prior(self, replace: bool, steps: int = 1) -> T | None:
        """
        Value ``steps`` ticks before the tick about to be (re)applied.

        For a new tick that is ``steps - 1`` slots back from ``current``;
        for a correction the current slot is the tick being replaced, so
        it is ``steps`` slots back.
        """
        if not 1 <= steps <= self.depth:
            raise ValueError(f"steps must be between 1 and {self.depth}, got {steps}")
        offset = steps + 1 if replace else steps
        if offset > len(self._slots):
            return None
        return self._slots[-offset]

    def _slot(self, back: int) -> T | None:
        if back >= len(self._slots):
            return None
        return self._slots[-1 - back]

    @property
    def current(self) -> T | None:
        return self._slot(0)

    @property
    def previous(self) -> T | None:
        return self._slot(1)

    @property
    def two_previous(self) -> T | None:
        if self.depth < 2:
            return None
        return self._slot(2)

    def __len__(self) -> int:
        return len(self._slots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lookback):
            return NotImplemented
        return self.depth == other.depth and list(self._slots) == list(other._slots)

    def __repr__(self) -> str:
        return f"Lookback(depth={self.depth}, slots={list(self._slots)!r})"

    def clear(self) -> None:
        self._slots.clear()
