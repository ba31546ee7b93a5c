"""Centralized logging configuration for jobkit."""

import logging
import os
import sys

from jobkit.constants import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV_VAR


def configure_logging() -> None:
    """Configure logging for processes using jobkit.

    Respects JOBKIT_LOG_LEVEL environment variable:
    - DEBUG: Verbose logging, including identity synthesis and failed lookups
    - INFO: Info and above
    - WARNING: Warning and above (default)
    - ERROR: Error and above
    """
    log_level_name = os.getenv(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    log_level = getattr(logging, log_level_name, logging.WARNING)

    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Set level on all existing handlers
    for handler in logging.getLogger().handlers:
        handler.setLevel(log_level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
