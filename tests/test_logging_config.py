"""Tests for logging configuration"""

import logging

from jobkit.utils.logging_config import configure_logging, get_logger


def test_configure_logging_respects_environment(monkeypatch):
    """Test that JOBKIT_LOG_LEVEL sets the level of every root handler."""
    monkeypatch.setenv("JOBKIT_LOG_LEVEL", "debug")

    configure_logging()

    handlers = logging.getLogger().handlers
    assert handlers
    assert all(handler.level == logging.DEBUG for handler in handlers)


def test_configure_logging_ignores_unknown_levels(monkeypatch):
    """Test that an unknown level falls back to WARNING."""
    monkeypatch.setenv("JOBKIT_LOG_LEVEL", "chatty")

    configure_logging()

    assert all(handler.level == logging.WARNING for handler in logging.getLogger().handlers)


def test_get_logger_returns_named_logger():
    """Test that get_logger hands out standard named loggers."""
    assert get_logger("jobkit.example") is logging.getLogger("jobkit.example")
