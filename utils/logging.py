"""Logging utilities for the page editor backend.

All loggers live under the ``editor`` namespace and write to stderr.
"""

from __future__ import annotations

import logging
import sys

from config import LOG_LEVEL, LOG_FORMAT

LOGGER_NAMESPACE = 'editor'


def get_logger(name: str | None = None, level: int | None = None) -> logging.Logger:
    """Get a configured logger, e.g. ``get_logger('fs')`` -> ``editor.fs``."""
    full_name = f'{LOGGER_NAMESPACE}.{name}' if name else LOGGER_NAMESPACE
    logger = logging.getLogger(full_name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False  # Each logger owns its handler
    logger.setLevel(level if level is not None else LOG_LEVEL)
    return logger


app_logger = get_logger()
fs_logger = get_logger('fs')
save_logger = get_logger('save')
scan_logger = get_logger('scan')
upload_logger = get_logger('upload')
