"""
Tests for the logging setup.
"""

import logging

import pytest

from streamind.indicators.incremental import EMA, MACD
from streamind.utils.logger import (
    ColoredFormatter,
    Colors,
    IndicatorLogger,
    get_logger,
    setup_logger,
)


class TestIndicatorLogger:
    """Test singleton setup and structured events."""

    def test_get_logger_is_singleton(self):
        assert get_logger() is get_logger()
        assert isinstance(get_logger(), IndicatorLogger)

    def test_level_from_config(self, monkeypatch):
        monkeypatch.setenv("STREAMIND_LOG_LEVEL", "DEBUG")
        logger = get_logger()
        assert logger.main_logger.level == logging.DEBUG

    def test_setup_logger_replaces_instance(self):
        first = get_logger()
        second = setup_logger(log_level="ERROR")
        assert second is not first
        assert second.main_logger.level == logging.ERROR
        assert get_logger() is second

    def test_console_handler_only_by_default(self):
        logger = setup_logger()
        assert len(logger.main_logger.handlers) == 1
        assert isinstance(logger.main_logger.handlers[0].formatter, ColoredFormatter)

    def test_file_handler_with_log_dir(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = setup_logger(log_dir=str(log_dir), log_level="INFO")
        logger.info("hello %s", "world")
        for handler in logger.main_logger.handlers:
            handler.flush()
        files = list(log_dir.glob("streamind_*.log"))
        assert len(files) == 1
        assert "hello world" in files[0].read_text(encoding="utf-8")

    def test_event_format(self, caplog):
        logger = setup_logger(log_level="INFO")
        with caplog.at_level(logging.INFO, logger="streamind"):
            logger.event("RUN", "EMA(12)", rows=100, stable=True)
        assert "[RUN] | indicator=EMA(12) | rows=100 | stable=True" in caplog.text


class TestColoredFormatter:
    """Test console coloring."""

    def test_colors_level_and_message(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s")
        record = logging.LogRecord("streamind", logging.ERROR, __file__, 1, "bad %s", ("tick",), None)
        line = formatter.format(record)
        assert Colors.RED in line
        assert "bad tick" in line

    def test_original_record_untouched(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s")
        record = logging.LogRecord("streamind", logging.INFO, __file__, 1, "plain", None, None)
        formatter.format(record)
        assert record.levelname == "INFO"
        assert record.msg == "plain"


class TestIndicatorLogRecords:
    """Test debug records emitted by indicators."""

    def test_stable_record(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="streamind"):
            ema = EMA(2)
            ema.updates([1.0, 2.0, 3.0])
        stable = [r for r in caplog.records if "[STABLE]" in r.getMessage()]
        assert len(stable) == 1
        assert "EMA(2)" in stable[0].getMessage()

    def test_created_record_for_compound(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="streamind"):
            MACD()
        assert any("[CREATED] | indicator=MACD(12,26,9)" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("level", ["WARNING", "ERROR"])
    def test_debug_records_suppressed_by_level(self, caplog, level):
        setup_logger(log_level=level)
        EMA(2).updates([1.0, 2.0])
        assert not [r for r in caplog.records if "[STABLE]" in r.getMessage()]
