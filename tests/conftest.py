"""
Pytest configuration for streamind tests.

Fixture data:
- prices / cci_candles: reference series with values checked against Tulip Indicators
- random_walk / random_candles: numpy-generated series for equivalence tests
"""

import numpy as np
import pytest

from streamind.config.config import Config
from streamind.indicators.incremental import Candle
from streamind.utils import logger as logger_module
from streamind.utils.logger import IndicatorLogger


PRICES = [
    81.59, 81.06, 82.87, 83.0, 83.61, 83.15, 82.84, 83.99,
    84.55, 84.36, 85.53, 86.54, 86.89, 87.77, 87.29,
]

CCI_CANDLES = [
    (83.85, 83.07, 83.61),
    (83.9, 83.11, 83.15),
    (83.33, 82.49, 82.84),
    (84.3, 82.3, 83.99),
    (84.84, 84.15, 84.55),
    (85.0, 84.11, 84.36),
    (85.9, 84.03, 85.53),
    (86.58, 85.39, 86.54),
    (86.98, 85.76, 86.89),
    (88.0, 87.17, 87.77),
    (87.87, 87.01, 87.29),
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate every test from the caller's environment and cached singletons."""
    for name in (
        "STREAMIND_NUMERIC",
        "STREAMIND_DECIMAL_PRECISION",
        "STREAMIND_MOVING_AVERAGE",
        "STREAMIND_LOG_LEVEL",
        "STREAMIND_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    # No stray .env is picked up from the working directory
    monkeypatch.chdir(tmp_path)

    Config._instance = None
    IndicatorLogger._instance = None
    IndicatorLogger._initialized = False
    logger_module._logger = None
    yield
    Config._instance = None
    IndicatorLogger._instance = None
    IndicatorLogger._initialized = False
    logger_module._logger = None


@pytest.fixture
def prices() -> list[float]:
    """15 closing prices."""
    return list(PRICES)


@pytest.fixture
def cci_candles() -> list[Candle]:
    """11 high/low/close candles."""
    return [Candle(high, low, close) for high, low, close in CCI_CANDLES]


@pytest.fixture
def random_walk() -> list[float]:
    """200 prices of a seeded random walk, rounded to cents."""
    rng = np.random.default_rng(42)
    steps = rng.normal(0.0, 1.0, 200)
    return np.round(100.0 + np.cumsum(steps), 2).tolist()


@pytest.fixture
def random_candles(random_walk) -> list[Candle]:
    """Candles around the random walk closes (high >= close >= low)."""
    rng = np.random.default_rng(7)
    up = np.round(np.abs(rng.normal(0.0, 0.5, len(random_walk))), 2)
    down = np.round(np.abs(rng.normal(0.0, 0.5, len(random_walk))), 2)
    return [
        Candle(round(close + u, 2), round(close - d, 2), close)
        for close, u, d in zip(random_walk, up.tolist(), down.tolist())
    ]
