"""
Build incremental indicators by name.

create_incremental_indicator() maps a type string ("ema", "macd", ...) and a
parameter dict to a configured indicator; the query helpers list what it
can build.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from streamind.utils.logger import get_logger

from .base import IncrementalIndicator
from .buffer_based import MAD, BollingerBands, BollingerBandsWidth, CCI
from .core import ATR, MACD, AccelerationBands
from .lookback import Period, StochasticOscillator
from .moving_average import DEMA, EMA, RMA, SMA, WMA, MovingAverageType
from .stateful import PSAR
from .trivial import TR


# =============================================================================
# Factory for creating incremental indicators from type + params
# =============================================================================

# Accepted by every indicator type
_COMMON_PARAMS = frozenset({"numeric"})

_VALID_PARAMS: dict[str, frozenset[str]] = {
    "sma": frozenset({"interval"}),
    "ema": frozenset({"interval", "presma"}),
    "rma": frozenset({"interval"}),
    "wsma": frozenset({"interval"}),
    "wma": frozenset({"interval"}),
    "dema": frozenset({"interval"}),
    "tr": frozenset(),
    "atr": frozenset({"interval", "smoothing"}),
    "period": frozenset({"interval"}),
    "mad": frozenset({"interval"}),
    "macd": frozenset({"short_interval", "long_interval", "signal_interval", "smoothing"}),
    "stoch": frozenset({"k_period", "d_period", "smoothing"}),
    "abands": frozenset({"interval", "width", "smoothing"}),
    "bbands": frozenset({"interval", "deviation_multiplier"}),
    "bbw": frozenset({"interval", "deviation_multiplier"}),
    "cci": frozenset({"interval"}),
    "psar": frozenset({"acceleration", "increment", "maximum"}),
}


def _validate_params(indicator_type: str, params: dict[str, Any]) -> None:
    """Reject parameter names the indicator type does not take."""
    valid = _VALID_PARAMS.get(indicator_type)
    if valid is None:
        return
    unknown = set(params.keys()) - valid - _COMMON_PARAMS
    if unknown:
        raise ValueError(
            f"Unknown params for '{indicator_type}': {sorted(unknown)}. "
            f"Valid: {sorted(valid | _COMMON_PARAMS)}"
        )


# Each entry maps indicator type string to a callable(params) -> IncrementalIndicator.
_FACTORY: dict[str, Callable[[dict[str, Any]], IncrementalIndicator]] = {
    # Moving averages
    "sma": lambda p: SMA(p.get("interval", 20), numeric=p.get("numeric")),
    "ema": lambda p: EMA(p.get("interval", 20), presma=p.get("presma", False), numeric=p.get("numeric")),
    "rma": lambda p: RMA(p.get("interval", 14), numeric=p.get("numeric")),
    "wsma": lambda p: RMA(p.get("interval", 14), numeric=p.get("numeric")),
    "wma": lambda p: WMA(p.get("interval", 20), numeric=p.get("numeric")),
    "dema": lambda p: DEMA(p.get("interval", 20), numeric=p.get("numeric")),
    # Leaf series
    "tr": lambda p: TR(numeric=p.get("numeric")),
    "period": lambda p: Period(p.get("interval", 14), numeric=p.get("numeric")),
    "mad": lambda p: MAD(p.get("interval", 20), numeric=p.get("numeric")),
    "bbands": lambda p: BollingerBands(p.get("interval", 20), p.get("deviation_multiplier", 2), numeric=p.get("numeric")),
    # Compound indicators
    "atr": lambda p: ATR(p.get("interval", 14), p.get("smoothing", MovingAverageType.RMA), numeric=p.get("numeric")),
    "macd": lambda p: MACD(
        p.get("short_interval", 12),
        p.get("long_interval", 26),
        p.get("signal_interval", 9),
        p.get("smoothing", MovingAverageType.EMA),
        numeric=p.get("numeric"),
    ),
    "stoch": lambda p: StochasticOscillator(p.get("k_period", 14), p.get("d_period", 3), p.get("smoothing"), numeric=p.get("numeric")),
    "abands": lambda p: AccelerationBands(p.get("interval", 20), p.get("width", 4), p.get("smoothing"), numeric=p.get("numeric")),
    "bbw": lambda p: BollingerBandsWidth(p.get("interval", 20), p.get("deviation_multiplier", 2), numeric=p.get("numeric")),
    "cci": lambda p: CCI(p.get("interval", 20), numeric=p.get("numeric")),
    # Stateful
    "psar": lambda p: PSAR(
        acceleration=p.get("acceleration", 0.02),
        increment=p.get("increment", 0.02),
        maximum=p.get("maximum", 0.2),
        numeric=p.get("numeric"),
    ),
}


def create_incremental_indicator(
    indicator_type: str,
    params: dict[str, Any],
) -> IncrementalIndicator | None:
    """
    Build the indicator named by ``indicator_type``.

    Unknown types return None (logged at debug as UNSUPPORTED); unknown
    parameter names raise ValueError. Omitted parameters take the defaults
    shown in _FACTORY.

    Example:
        >>> macd = create_incremental_indicator("macd", {"short_interval": 5})
        >>> macd.label
        'MACD(5,26,9)'
    """
    indicator_type = indicator_type.lower()
    _validate_params(indicator_type, params)

    factory_fn = _FACTORY.get(indicator_type)
    if factory_fn is None:
        get_logger().event("UNSUPPORTED", indicator_type, level=logging.DEBUG)
        return None
    return factory_fn(params)


# =============================================================================
# Registry queries
# =============================================================================


def supports_incremental(indicator_type: str) -> bool:
    """Check if indicator type can be built by create_incremental_indicator()."""
    return indicator_type.lower() in _FACTORY


def list_incremental_indicators() -> list[str]:
    """Get sorted list of all indicator types the factory can build."""
    return sorted(_FACTORY)


INCREMENTAL_INDICATORS = frozenset(list_incremental_indicators())
