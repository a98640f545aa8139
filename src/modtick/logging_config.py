"""Opt-in logging setup for modtick.

The library is silent by default (a ``NullHandler`` sits on the ``modtick``
logger). Call :func:`enable_console_logging` or :func:`configure_from_env` to
see segment transitions and stream exhaustion.

Environment variables:
    MODTICK_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Literal

__all__ = ["configure_from_env", "enable_console_logging", "set_level"]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOGGER_NAME = "modtick"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _get_library_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _remove_non_null_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def enable_console_logging(level: LogLevel | str = "INFO", fmt: str = DEFAULT_FORMAT) -> None:
    """Send modtick log records to stderr.

    Calling this again replaces the previous console handler.
    """
    logger = _get_library_logger()
    _remove_non_null_handlers(logger)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DEFAULT_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())


def set_level(level: LogLevel | str) -> None:
    _get_library_logger().setLevel(level.upper())


def configure_from_env() -> bool:
    """Enable console logging if ``MODTICK_LOGGING`` is set.

    Returns:
        True if logging was enabled.
    """
    level = os.environ.get("MODTICK_LOGGING", "").strip().upper()
    if not level:
        return False
    if level not in logging.getLevelNamesMapping():
        msg = f"Invalid MODTICK_LOGGING level: {level!r}"
        raise ValueError(msg)
    enable_console_logging(level)
    return True
