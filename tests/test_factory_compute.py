"""
Tests for the indicator factory and the pandas adapter.
"""

import logging
import math

import numpy as np
import pandas as pd
import pytest

from streamind.indicators import apply_incremental_indicator, run_incremental
from streamind.indicators.incremental import (
    EMA,
    INCREMENTAL_INDICATORS,
    MACD,
    PSAR,
    RMA,
    AccelerationBands,
    create_incremental_indicator,
    list_incremental_indicators,
    supports_incremental,
)
from streamind.utils.logger import setup_logger


@pytest.fixture
def ohlc(random_candles) -> pd.DataFrame:
    """OHLC frame built from the random candles."""
    index = pd.date_range("2024-01-01", periods=len(random_candles), freq="1h")
    return pd.DataFrame(
        {
            "high": [c.high for c in random_candles],
            "low": [c.low for c in random_candles],
            "close": [c.close for c in random_candles],
        },
        index=index,
    )


# =============================================================================
# Factory
# =============================================================================

class TestFactory:
    """Test create_incremental_indicator and registry queries."""

    def test_defaults(self):
        macd = create_incremental_indicator("macd", {})
        assert isinstance(macd, MACD)
        assert macd.label == "MACD(12,26,9)"

    def test_params_are_passed(self):
        ema = create_incremental_indicator("EMA", {"interval": 9, "presma": True, "numeric": "decimal"})
        assert isinstance(ema, EMA)
        assert ema.interval == 9
        assert ema.presma is True
        assert ema._num.name == "decimal"

    def test_wsma_builds_rma(self):
        assert isinstance(create_incremental_indicator("wsma", {"interval": 5}), RMA)

    def test_abands_smoothing(self):
        bands = create_incremental_indicator("abands", {"interval": 10, "smoothing": "wma"})
        assert isinstance(bands, AccelerationBands)
        assert type(bands._middle).__name__ == "WMA"

    def test_psar_params(self):
        psar = create_incremental_indicator("psar", {"maximum": 0.3})
        assert isinstance(psar, PSAR)
        assert psar.maximum == 0.3

    def test_unknown_params_raise(self):
        with pytest.raises(ValueError, match="Unknown params for 'sma'"):
            create_incremental_indicator("sma", {"length": 20})

    def test_unsupported_type_returns_none(self, caplog):
        setup_logger()
        with caplog.at_level(logging.DEBUG, logger="streamind"):
            assert create_incremental_indicator("ichimoku", {}) is None
        assert "[UNSUPPORTED] | indicator=ichimoku" in caplog.text

    def test_registry_queries(self):
        names = list_incremental_indicators()
        assert names == sorted(names)
        assert set(names) == INCREMENTAL_INDICATORS
        assert supports_incremental("MACD")
        assert not supports_incremental("ichimoku")

    def test_every_type_builds_with_defaults(self):
        for name in list_incremental_indicators():
            indicator = create_incremental_indicator(name, {})
            assert indicator is not None
            assert not indicator.is_stable


# =============================================================================
# DataFrame adapter
# =============================================================================

class TestRunIncremental:
    """Test row-by-row computation over pandas data."""

    def test_scalar_series(self, ohlc):
        result = run_incremental(EMA(10), ohlc["close"])
        assert isinstance(result, pd.Series)
        assert result.name == "EMA(10)"
        assert result.index.equals(ohlc.index)
        assert result.iloc[:9].isna().all()
        assert result.iloc[9:].notna().all()

        expected = EMA(10)
        expected.updates(ohlc["close"].tolist())
        assert result.iloc[-1] == pytest.approx(expected.get_result())

    def test_close_column_taken_from_frame(self, ohlc):
        from_frame = run_incremental(EMA(5), ohlc)
        from_series = run_incremental(EMA(5), ohlc["close"])
        pd.testing.assert_series_equal(from_frame, from_series)

    def test_multi_output_frame(self, ohlc):
        result = run_incremental(MACD(3, 6, 4), ohlc["close"])
        assert isinstance(result, pd.DataFrame)
        assert list(result.columns) == ["macd", "signal", "histogram"]
        assert result.iloc[:5].isna().all().all()
        assert result.iloc[5:].notna().all().all()
        np.testing.assert_allclose(
            result["histogram"].to_numpy(),
            (result["macd"] - result["signal"]).to_numpy(),
        )

    def test_candle_indicator(self, ohlc):
        result = run_incremental(AccelerationBands(20, 4), ohlc)
        assert list(result.columns) == ["lower", "middle", "upper"]
        stable = result.dropna()
        assert len(stable) == len(ohlc) - 19
        assert (stable["lower"] <= stable["middle"]).all()
        assert (stable["middle"] <= stable["upper"]).all()

    def test_candle_indicator_needs_frame(self, ohlc):
        with pytest.raises(ValueError, match="Fix:"):
            run_incremental(PSAR(), ohlc["close"])

    def test_missing_columns_raise(self, ohlc):
        with pytest.raises(ValueError, match="missing columns"):
            run_incremental(PSAR(), ohlc[["high", "close"]])


class TestApplyIncrementalIndicator:
    """Test appending indicator columns to a frame."""

    def test_scalar_column(self, ohlc):
        out = apply_incremental_indicator(ohlc, "ema", {"interval": 10}, output_key="ema_10")
        assert "ema_10" in out.columns
        assert "ema_10" not in ohlc.columns
        assert math.isnan(out["ema_10"].iloc[0])

    def test_prefixed_columns(self, ohlc):
        out = apply_incremental_indicator(ohlc, "bbands", {"interval": 20})
        assert {"bbands_lower", "bbands_middle", "bbands_upper"} <= set(out.columns)

    def test_input_col(self, ohlc):
        out = apply_incremental_indicator(ohlc, "sma", {"interval": 3}, input_col="high")
        assert out["sma"].iloc[2] == pytest.approx(ohlc["high"].iloc[:3].mean())

    def test_candle_indicator_uses_frame(self, ohlc):
        out = apply_incremental_indicator(ohlc, "atr", {"interval": 14})
        assert out["atr"].iloc[13:].notna().all()
        assert (out["atr"].dropna() > 0).all()

    def test_unsupported_raises(self, ohlc):
        with pytest.raises(ValueError, match="not supported"):
            apply_incremental_indicator(ohlc, "ichimoku")
