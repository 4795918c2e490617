"""
DataFrame adapter for incremental indicators.

Feeds pandas data through an indicator row by row. Only values available
at or before each row are used (no look-ahead), and rows where the
indicator is still warming up are NaN.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np
import pandas as pd

from streamind.indicators.incremental import (
    Candle,
    IncrementalIndicator,
    create_incremental_indicator,
)
from streamind.utils.logger import get_logger


def _observations(indicator: IncrementalIndicator, data: pd.Series | pd.DataFrame) -> list[Any]:
    """Turn ``data`` into the observations ``indicator`` consumes."""
    if indicator.INPUTS == ("close",):
        if isinstance(data, pd.DataFrame):
            if "close" not in data.columns:
                raise ValueError(
                    f"{indicator.label} needs a 'close' column, got {list(data.columns)}\n"
                    f"\n"
                    f"Fix: run_incremental(indicator, df['my_column'])"
                )
            data = data["close"]
        return data.tolist()

    if not isinstance(data, pd.DataFrame):
        raise ValueError(
            f"{indicator.label} needs a DataFrame with columns {list(indicator.INPUTS)}\n"
            f"\n"
            f"Fix: run_incremental(indicator, df[['high', 'low', 'close']])"
        )
    missing = [c for c in indicator.INPUTS if c not in data.columns]
    if missing:
        raise ValueError(
            f"{indicator.label} is missing columns {missing}. "
            f"Available: {list(data.columns)}"
        )
    return [
        Candle(high, low, close)
        for high, low, close in zip(data["high"].tolist(), data["low"].tolist(), data["close"].tolist())
    ]


def run_incremental(
    indicator: IncrementalIndicator,
    data: pd.Series | pd.DataFrame,
) -> pd.Series | pd.DataFrame:
    """
    Run an indicator over every row of ``data``.

    Args:
        indicator: Freshly constructed indicator (state is consumed).
        data: Series of prices for close-input indicators, or a DataFrame
            with high/low/close columns for candle-input indicators.

    Returns:
        Series named after the indicator label for scalar results, or a
        DataFrame with one column per result field (indicator.OUTPUTS).
    """
    results = [indicator.update(obs) for obs in _observations(indicator, data)]

    if not indicator.OUTPUTS:
        values = [np.nan if r is None else r for r in results]
        return pd.Series(values, index=data.index, name=indicator.label)

    columns = {
        name: [np.nan if r is None else getattr(r, name) for r in results]
        for name in indicator.OUTPUTS
    }
    return pd.DataFrame(columns, index=data.index)


def apply_incremental_indicator(
    df: pd.DataFrame,
    indicator_type: str,
    params: Optional[dict[str, Any]] = None,
    output_key: Optional[str] = None,
    input_col: str = "close",
) -> pd.DataFrame:
    """
    Compute an indicator and append its columns to a copy of ``df``.

    Args:
        df: OHLC DataFrame.
        indicator_type: Factory type string ("ema", "macd", ...).
        params: Factory parameters.
        output_key: Column name (scalar results) or prefix (multi-output
            results, e.g. "macd" -> "macd_macd", "macd_signal", ...).
            Defaults to indicator_type.
        input_col: Source column for close-input indicators.

    Returns:
        New DataFrame with the indicator column(s) added.

    Raises:
        ValueError: If the indicator type is unsupported or params are invalid.
    """
    logger = get_logger()
    indicator = create_incremental_indicator(indicator_type, params or {})
    if indicator is None:
        raise ValueError(
            f"Indicator '{indicator_type}' is not supported incrementally\n"
            f"\n"
            f"Fix: use one of list_incremental_indicators()"
        )

    key = output_key or indicator_type.lower()
    source = df[input_col] if indicator.INPUTS == ("close",) else df
    computed = run_incremental(indicator, source)

    out = df.copy()
    if isinstance(computed, pd.Series):
        out[key] = computed
    else:
        for name in computed.columns:
            out[f"{key}_{name}"] = computed[name]

    logger.event(
        "RUN", indicator.label, level=logging.DEBUG,
        rows=len(df), stable=indicator.is_stable,
    )
    return out
