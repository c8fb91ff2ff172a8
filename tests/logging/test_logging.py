"""Tests for centralized logging behavior and configuration."""

import logging
from io import StringIO

import pytest

from fluxtrace.logging import (
    LOG_LEVEL_ENV,
    disable_debug_logging,
    enable_debug_logging,
    get_logger,
    parse_level,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)


@pytest.fixture(autouse=True)
def _reset_logging_each_test(monkeypatch):
    """Reset logging state before and after each test to avoid cross-test bleed."""
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    reset_logging()
    yield
    reset_logging()


def test_effective_levels_enable_disable():
    """INFO by default, DEBUG after enable, back to INFO after disable."""
    logger = get_logger("fluxtrace.test")

    capture = StringIO()
    handler = logging.StreamHandler(capture)
    handler.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.addHandler(handler)

    logger.info("info-1")
    assert "info-1" in capture.getvalue()

    logger.debug("debug-1")
    assert "debug-1" not in capture.getvalue()

    enable_debug_logging()
    logger.debug("debug-2")
    assert "debug-2" in capture.getvalue()

    disable_debug_logging()
    logger.debug("debug-3")
    assert "debug-3" not in capture.getvalue()

    logger.removeHandler(handler)


def test_global_level_propagates_to_children():
    logger1 = get_logger("fluxtrace.module1")
    assert logger1.getEffectiveLevel() == logging.INFO

    set_global_log_level("warning")
    assert logger1.getEffectiveLevel() == logging.WARNING
    assert get_logger("fluxtrace.module2").getEffectiveLevel() == logging.WARNING


def test_setup_root_logger_idempotent():
    capture = StringIO()
    setup_root_logger(level=logging.INFO, handler=logging.StreamHandler(capture))
    root_logger = logging.getLogger("fluxtrace")
    assert len(root_logger.handlers) == 1

    setup_root_logger(level=logging.DEBUG)
    assert len(root_logger.handlers) == 1
    assert root_logger.level == logging.INFO


def test_custom_format_string_applied():
    capture = StringIO()
    fmt = "LEVEL:%(levelname)s|NAME:%(name)s|MSG:%(message)s"
    setup_root_logger(
        level=logging.INFO, format_string=fmt, handler=logging.StreamHandler(capture)
    )

    get_logger("fluxtrace.test.format").info("hello")
    out = capture.getvalue()
    assert "LEVEL:INFO" in out
    assert "NAME:fluxtrace.test.format" in out
    assert "MSG:hello" in out


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    setup_root_logger(handler=logging.StreamHandler(StringIO()))
    assert logging.getLogger("fluxtrace").level == logging.DEBUG


@pytest.mark.parametrize(
    "value,expected",
    [(None, logging.INFO), ("", logging.INFO), ("Error", logging.ERROR), (10, 10)],
)
def test_parse_level(value, expected):
    assert parse_level(value) == expected


def test_parse_level_rejects_unknown_names():
    with pytest.raises(ValueError, match="Unknown log level"):
        parse_level("chatty")
