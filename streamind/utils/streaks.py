"""
Price streak detection.

A streak is a run of consecutive strictly rising (or strictly falling)
prices. Equal neighbours end a streak.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class Streak:
    """A run of consecutive moves in one direction."""

    length: int
    percentage: float
    """Price change in percent from the streak's first to last price."""


def get_streaks(prices: Sequence[float], side: Literal["up", "down"]) -> list[Streak]:
    """
    Find all streaks in ``prices`` moving in direction ``side``.

    Example:
        >>> get_streaks([1, 2, 3, 2], "up")
        [Streak(length=2, percentage=200.0)]
    """
    if side not in ("up", "down"):
        raise ValueError(
            f"side must be 'up' or 'down', got '{side}'\n"
            f"\n"
            f"Fix: get_streaks(prices, side='up')"
        )

    streaks: list[Streak] = []
    current = 0

    def close_streak(end: int) -> None:
        end_price = prices[end - 1]
        start_price = prices[end - current - 1]
        if start_price == 0:
            # no finite percentage from zero; the sign follows the move
            percentage = math.copysign(math.inf, end_price - start_price)
        else:
            percentage = (end_price - start_price) / start_price * 100
        streaks.append(Streak(length=current, percentage=percentage))

    for i in range(1, len(prices)):
        if side == "up":
            moved = prices[i] > prices[i - 1]
        else:
            moved = prices[i] < prices[i - 1]
        if moved:
            current += 1
            continue
        if current > 0:
            close_streak(i)
        current = 0

    if current > 0:
        close_streak(len(prices))

    return streaks
