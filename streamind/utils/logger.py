"""
Logging for streamind.

Indicator modules log through ``logging.getLogger(__name__)``; their
records propagate to the ``streamind`` logger, which this module equips
with a colored console handler and, when a log directory is configured,
a dated log file. Nothing is installed at import time: handlers appear on
the first ``get_logger()`` or ``setup_logger()`` call.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "streamind"


class Colors:
    """ANSI escape sequences."""
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints level name and message by severity."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record):
        # Tint a copy; the file handler formats the same record uncolored
        tinted = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(tinted.levelno, Colors.WHITE)
        tinted.levelname = f"{color}{tinted.levelname}{Colors.RESET}"
        tinted.msg = f"{color}{tinted.getMessage()}{Colors.RESET}"
        tinted.args = None
        return super().format(tinted)


class IndicatorLogger:
    """
    Process-wide owner of the ``streamind`` logger.

    - Colored console output
    - ``streamind_YYYYMMDD.log`` in ``log_dir`` when one is given
    - ``event()`` for one-line ``[ACTION] | key=value`` records
    """

    _instance: Optional['IndicatorLogger'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: Optional[str] = None, log_level: str = "WARNING"):
        if IndicatorLogger._initialized:
            return

        self.log_dir = Path(log_dir) if log_dir else None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._configure(ROOT_LOGGER_NAME, log_level)

        IndicatorLogger._initialized = True

    def _configure(self, name: str, level: str) -> logging.Logger:
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper()))
        logger.handlers.clear()

        console = logging.StreamHandler()
        console.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S",
        ))
        logger.addHandler(console)

        if self.log_dir is not None:
            path = self.log_dir / f"{ROOT_LOGGER_NAME}_{datetime.now():%Y%m%d}.log"
            to_file = logging.FileHandler(path, encoding="utf-8")
            to_file.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
            logger.addHandler(to_file)

        return logger

    def debug(self, msg: str, *args, **kwargs):
        self.main_logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.main_logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.main_logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.main_logger.error(msg, *args, **kwargs)

    def event(self, action: str, indicator: str, level: int = logging.INFO, **fields):
        """
        Log one indicator lifecycle event.

        Args:
            action: RUN, UNSUPPORTED, ...
            indicator: Indicator label or type, e.g. "EMA(12)"
            level: Record level
            **fields: Extra ``key=value`` pairs, in order

        Example line:
            [RUN] | indicator=EMA(12) | rows=500 | stable=True
        """
        line = " | ".join(
            [f"[{action}]", f"indicator={indicator}"]
            + [f"{key}={value}" for key, value in fields.items()]
        )
        self.main_logger.log(level, line)


_logger: Optional[IndicatorLogger] = None


def get_logger(log_dir: Optional[str] = None, log_level: Optional[str] = None) -> IndicatorLogger:
    """
    Shared IndicatorLogger, created on first use.

    Settings not passed in come from configuration (STREAMIND_LOG_LEVEL,
    STREAMIND_LOG_DIR).
    """
    global _logger
    if _logger is None:
        from streamind.config import get_config

        log_config = get_config().log
        _logger = IndicatorLogger(
            log_dir if log_dir is not None else log_config.log_dir,
            log_level or log_config.level,
        )
    return _logger


def setup_logger(log_dir: Optional[str] = None, log_level: str = "WARNING") -> IndicatorLogger:
    """Replace the shared logger with one built from explicit settings."""
    global _logger
    IndicatorLogger._initialized = False
    IndicatorLogger._instance = None
    _logger = IndicatorLogger(log_dir, log_level)
    return _logger
