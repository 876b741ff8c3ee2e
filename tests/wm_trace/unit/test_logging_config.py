"""Unit tests for logging configuration."""

import logging

import pytest

from wm_trace.logging_config import (
    DEBUG_FORMAT,
    DEFAULT_FORMAT,
    VERBOSE_FORMAT,
    ColoredFormatter,
    log_timing,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("wm_trace")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.mark.parametrize("verbose,debug,level,fmt", [
    (False, False, logging.WARNING, DEFAULT_FORMAT),
    (True, False, logging.INFO, VERBOSE_FORMAT),
    (False, True, logging.DEBUG, DEBUG_FORMAT),
    (True, True, logging.DEBUG, DEBUG_FORMAT),
])
def test_setup_logging_levels(verbose, debug, level, fmt):
    logger = setup_logging(verbose=verbose, debug=debug)

    assert logger.name == "wm_trace"
    assert logger.level == level
    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == fmt


def test_setup_logging_replaces_handlers():
    setup_logging()
    setup_logging(verbose=True)
    assert len(logging.getLogger("wm_trace").handlers) == 1


def test_colored_formatter_restores_levelname():
    formatter = ColoredFormatter(DEFAULT_FORMAT)
    record = logging.LogRecord("wm_trace", logging.ERROR, __file__, 1, "boom", None, None)

    output = formatter.format(record)

    assert "\033[31m" in output
    assert record.levelname == "ERROR"


def test_log_timing(caplog):
    logger = logging.getLogger("wm_trace.test")
    with caplog.at_level(logging.INFO, logger="wm_trace.test"):
        with log_timing("Parse trace", logger):
            pass
    assert "Parse trace completed in" in caplog.text
