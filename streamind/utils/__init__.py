"""
Shared utilities: numeric backends, logging, streak detection.
"""

from .numeric import (
    Number,
    NumericBackend,
    FloatBackend,
    DecimalBackend,
    FLOAT,
    resolve_numeric,
    average,
    standard_deviation,
    mean_absolute_deviation,
    weighted_average,
    exponential_average,
)
from .logger import (
    IndicatorLogger,
    ColoredFormatter,
    get_logger,
    setup_logger,
)
from .streaks import Streak, get_streaks

__all__ = [
    # Numeric
    "Number",
    "NumericBackend",
    "FloatBackend",
    "DecimalBackend",
    "FLOAT",
    "resolve_numeric",
    "average",
    "standard_deviation",
    "mean_absolute_deviation",
    "weighted_average",
    "exponential_average",
    # Logging
    "IndicatorLogger",
    "ColoredFormatter",
    "get_logger",
    "setup_logger",
    # Streaks
    "Streak",
    "get_streaks",
]
