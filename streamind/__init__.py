"""
streamind - Streaming technical indicators

Incremental indicators over price and candle streams, with in-place
correction of the newest observation and results identical to batch
computation over the same data.
"""

__version__ = "1.0.0"
__author__ = "streamind"

from .config import get_config, reload_config
from .indicators import (
    Candle,
    NotEnoughDataError,
    MovingAverageType,
    create_incremental_indicator,
    list_incremental_indicators,
    run_incremental,
    apply_incremental_indicator,
)
from .utils import get_logger, setup_logger, get_streaks, Streak

__all__ = [
    "__version__",
    "get_config",
    "reload_config",
    "Candle",
    "NotEnoughDataError",
    "MovingAverageType",
    "create_incremental_indicator",
    "list_incremental_indicators",
    "run_incremental",
    "apply_incremental_indicator",
    "get_logger",
    "setup_logger",
    "get_streaks",
    "Streak",
]
