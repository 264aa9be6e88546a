"""Logging setup for the seating engine.

Every module logger hangs off the ``seatplan`` package logger, which owns one
stream handler. The root logger is never touched, so a host process keeps its
own logging configuration.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from seatplan.utils.config import get_settings


PACKAGE_LOGGER = "seatplan"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(
    level: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Set the package log level and attach its handler on first use.

    ``level`` defaults to ``Settings.log_level``. Later calls only change the
    level; the handler and its stream stay as first configured.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel((level or get_settings().log_level).upper())
    if not package_logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return ``name`` as a child of the package logger.

    Names outside the package (``app``, ``__main__``) are nested under it so
    they share its handler.
    """
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
