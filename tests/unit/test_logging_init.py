from __future__ import annotations

import logging
from io import StringIO
from unittest.mock import patch

import sheetrows.logging.init as log_init
from sheetrows.logging.init import (
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    set_debug,
    set_stream,
    setup_logging,
)


def _capture(logger: logging.Logger) -> StringIO:
    captured = StringIO()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(captured)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    return captured


def test_setup_logging_creates_logger_with_labeled_formatter():
    reset_logging()
    logger = setup_logging()
    assert logger.name == "sheetrows"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    reset_logging()
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger("test_sheetrows_labels")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    captured = _capture(logger)

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_get_logger_returns_configured_logger():
    reset_logging()
    configured = setup_logging()
    assert get_logger() is configured


def test_setup_logging_idempotent():
    reset_logging()
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_reset_then_setup_does_not_duplicate_handlers():
    reset_logging()
    setup_logging()
    reset_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1


def test_child_module_loggers_share_the_handler():
    reset_logging()
    logger = setup_logging()
    captured = _capture(logger)
    logging.getLogger("sheetrows.services.template").warning("row 3 dropped")
    assert captured.getvalue().strip() == "WARN row 3 dropped"


def test_set_debug_lowers_levels():
    reset_logging()
    logger = setup_logging()
    set_debug(logger)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)
    reset_logging()


def test_summary_level_logging():
    reset_logging()
    logger = setup_logging()
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"
    with patch.object(logger, "_log") as mock_log:
        logger.log(SUMMARY_LEVEL, "source=f.xlsx rows=1")
        mock_log.assert_called_once()


def test_log_summary_convenience_function():
    reset_logging()
    logger = setup_logging()
    captured = _capture(logger)
    log_summary("source=phonebook.xlsx sheet=Sheet1 rows=5 mapped=1 failed=3")
    assert captured.getvalue().strip() == "SUMMARY source=phonebook.xlsx sheet=Sheet1 rows=5 mapped=1 failed=3"
    log_init._logger = None


def test_set_stream_moves_console_output():
    reset_logging()
    logger = setup_logging()
    first = _capture(logger)
    second = StringIO()
    set_stream(logger, second)
    logger.info("moved")
    assert first.getvalue() == ""
    assert second.getvalue().strip() == "INFO moved"
    log_init._logger = None
