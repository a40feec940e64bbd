from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Logging initialization with labeled prefixes.

Console lines carry one label per level (INFO|WARN|ERROR|SUMMARY) followed by
the message. SUMMARY is a custom level between INFO and WARNING used for the
single end-of-run summary line.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
    "set_debug",
    "set_stream",
]

LOGGER_NAME = "sheetrows"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Format records as ``LABEL message``."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{level_label} {record.getMessage()}"


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure the ``sheetrows`` logger (stdout, labeled). Idempotent.

    Module loggers (``sheetrows.services.template`` etc.) are children of this
    logger, so their records share the handler.
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # avoid duplicated handlers when reconfigured after reset_logging()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def set_debug(logger: logging.Logger) -> None:
    """Lower the logger and its handlers to DEBUG."""
    for h in logger.handlers:
        h.setLevel(logging.DEBUG)
    logger.setLevel(logging.DEBUG)


def set_stream(logger: logging.Logger, stream: TextIO) -> None:
    """Point the logger's console handlers at ``stream`` (e.g. stderr when stdout carries data)."""
    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler):
            h.setStream(stream)


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    _logger = None
