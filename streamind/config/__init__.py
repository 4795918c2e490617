"""
Configuration management.
"""

from .config import (
    Config,
    get_config,
    reload_config,
    IndicatorDefaults,
    LogConfig,
    NUMERIC_BACKENDS,
    LOG_LEVELS,
)

__all__ = [
    "Config",
    "get_config",
    "reload_config",
    "IndicatorDefaults",
    "LogConfig",
    "NUMERIC_BACKENDS",
    "LOG_LEVELS",
]
