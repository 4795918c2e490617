"""
Configuration management for streamind.
Indicator defaults and logging settings, read from STREAMIND_* environment
variables (optionally seeded from a .env file).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


NUMERIC_BACKENDS = ("float", "decimal")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class IndicatorDefaults:
    """
    Defaults applied when an indicator is constructed without them.

    numeric:
        Backend used when an indicator receives numeric=None.
        "float" is native binary floating point, "decimal" uses
        decimal.Decimal with `decimal_precision` significant digits
        for division and square roots.

    moving_average:
        Smoothing used by compound indicators whose documented default is
        the simple windowed average (AccelerationBands, StochasticOscillator).
    """
    numeric: str = "float"
    decimal_precision: int = 28
    moving_average: str = "sma"


@dataclass
class LogConfig:
    """Where and how verbosely streamind logs."""
    level: str = "WARNING"
    log_dir: Optional[str] = None


class Config:
    """
    Process-wide settings singleton.

    Reads the environment once; fails on load if any value is invalid,
    listing every problem found.
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=False)

        self.indicators = self._load_indicator_defaults()
        self.log = self._load_log_config()

        ok, errors = self.validate()
        if not ok:
            Config._instance = None
            raise ValueError(
                "Invalid streamind configuration:\n  - " + "\n  - ".join(errors)
            )

        self._initialized = True

    def _load_indicator_defaults(self) -> IndicatorDefaults:
        """Load indicator defaults (STREAMIND_NUMERIC, STREAMIND_DECIMAL_PRECISION, STREAMIND_MOVING_AVERAGE)."""
        precision_raw = os.getenv("STREAMIND_DECIMAL_PRECISION", "28")
        try:
            precision = int(precision_raw)
        except ValueError:
            precision = -1
        return IndicatorDefaults(
            numeric=os.getenv("STREAMIND_NUMERIC", "float").strip().lower(),
            decimal_precision=precision,
            moving_average=os.getenv("STREAMIND_MOVING_AVERAGE", "sma").strip().lower(),
        )

    def _load_log_config(self) -> LogConfig:
        """Load logging configuration (STREAMIND_LOG_LEVEL, STREAMIND_LOG_DIR)."""
        return LogConfig(
            level=os.getenv("STREAMIND_LOG_LEVEL", "WARNING").strip().upper(),
            log_dir=os.getenv("STREAMIND_LOG_DIR") or None,
        )

    def reload(self, env_file: str = ".env"):
        """Build a fresh instance from the current environment."""
        self._initialized = False
        Config._instance = None
        return Config(env_file)

    def validate(self) -> tuple[bool, List[str]]:
        """
        Validate loaded settings.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        # Imported here: moving_average imports config for its defaults
        from streamind.indicators.incremental.moving_average import MovingAverageType

        errors: List[str] = []

        if self.indicators.numeric not in NUMERIC_BACKENDS:
            errors.append(
                f"STREAMIND_NUMERIC='{self.indicators.numeric}' "
                f"(expected one of {', '.join(NUMERIC_BACKENDS)})"
            )
        if self.indicators.decimal_precision < 1:
            errors.append("STREAMIND_DECIMAL_PRECISION must be a positive integer")
        valid_averages = [t.value for t in MovingAverageType]
        if self.indicators.moving_average not in valid_averages:
            errors.append(
                f"STREAMIND_MOVING_AVERAGE='{self.indicators.moving_average}' "
                f"(expected one of {', '.join(valid_averages)})"
            )
        if self.log.level not in LOG_LEVELS:
            errors.append(
                f"STREAMIND_LOG_LEVEL='{self.log.level}' "
                f"(expected one of {', '.join(LOG_LEVELS)})"
            )

        return len(errors) == 0, errors


def get_config(env_file: str = ".env") -> Config:
    """Cached settings, loaded on first call."""
    return Config(env_file)


def reload_config(env_file: str = ".env") -> Config:
    """Drop the cached config and read the environment again."""
    Config._instance = None
    return Config(env_file)
