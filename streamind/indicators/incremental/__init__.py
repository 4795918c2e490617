"""
Incremental indicator computation for streaming data.

O(1) (or O(window)) per-tick updates. Every indicator produces the same
result as get_result_from_batch() over the same observations, and accepts
corrections of the most recent tick with update(value, replace=True).

Usage:
    from streamind.indicators.incremental import EMA

    # Warm up with historical data
    ema = EMA(20)
    ema.updates(historical_closes)

    # Then update incrementally in a live loop
    ema.update(new_close)
    ema.update(corrected_close, replace=True)
    current_value = ema.get_result()
"""

from __future__ import annotations

# Base classes and shared types
from .base import (
    Candle,
    CompositeIndicator,
    IncrementalIndicator,
    IndicatorSeries,
    NotEnoughDataError,
    as_candle,
)
from .results import BandsResult, MACDResult, PeriodResult, StochasticResult

# Moving averages
from .moving_average import (
    DEMA,
    EMA,
    RMA,
    SMA,
    WMA,
    WSMA,
    MovingAverage,
    MovingAverageType,
    create_moving_average,
    resolve_moving_average,
)

# Trivial indicators
from .trivial import TR

# Lookback-based indicators
from .lookback import Period, StochasticOscillator

# Buffer-based indicators
from .buffer_based import MAD, BollingerBands, BollingerBandsWidth, CCI

# Core compound indicators
from .core import ATR, MACD, AccelerationBands

# Stateful indicators
from .stateful import PSAR

# Factory and utilities
from .factory import (
    create_incremental_indicator,
    supports_incremental,
    list_incremental_indicators,
    INCREMENTAL_INDICATORS,
)

__all__ = [
    # Base
    "Candle",
    "CompositeIndicator",
    "IncrementalIndicator",
    "IndicatorSeries",
    "NotEnoughDataError",
    "as_candle",
    # Results
    "BandsResult",
    "MACDResult",
    "PeriodResult",
    "StochasticResult",
    # Moving averages
    "DEMA",
    "EMA",
    "RMA",
    "SMA",
    "WMA",
    "WSMA",
    "MovingAverage",
    "MovingAverageType",
    "create_moving_average",
    "resolve_moving_average",
    # Trivial
    "TR",
    # Lookback-based
    "Period",
    "StochasticOscillator",
    # Buffer-based
    "MAD",
    "BollingerBands",
    "BollingerBandsWidth",
    "CCI",
    # Core
    "ATR",
    "MACD",
    "AccelerationBands",
    # Stateful
    "PSAR",
    # Factory and utilities
    "create_incremental_indicator",
    "supports_incremental",
    "list_incremental_indicators",
    "INCREMENTAL_INDICATORS",
]
