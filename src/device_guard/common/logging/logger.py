"""Logging setup for Device Guard.

Modules log through ``logging.getLogger(__name__)``. Those loggers are
children of the ``device_guard`` package logger, which carries the single
stderr handler, so the CLI's stdout stays clean for printed results.
"""

import logging
import os
from typing import Optional

PACKAGE_LOGGER = "device_guard"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Set the package log level and attach the handler once.

    The level falls back to DEVICE_GUARD_LOG_LEVEL, then INFO.
    """
    level_name = (level or os.getenv("DEVICE_GUARD_LOG_LEVEL", "INFO")).upper()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for scripts and entry points outside the package namespace."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name.lstrip('_')}"
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging()
    return logging.getLogger(name)
