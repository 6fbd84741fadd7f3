"""Logging setup for the nodectl command line tool."""

from __future__ import annotations

import logging
import sys
from logging import Logger
from typing import Optional, Union

_LOGGER_NAME = "nodectl"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: Union[int, str] = logging.WARNING, log_format: Optional[str] = None) -> Logger:
    """Configure the package logger and return it.

    Output goes to stderr so that ``eval "$(nodectl activate ...)"`` only ever
    sees shell code on stdout. An unknown level name falls back to WARNING
    and is reported once the handler is in place.
    """

    ignored: Optional[str] = None
    if isinstance(level, str):
        name = level.strip().upper()
        if name in LOG_LEVELS:
            level = getattr(logging, name)
        else:
            ignored, level = level, logging.WARNING

    formatter = logging.Formatter(
        fmt=log_format or "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    if ignored is not None:
        logger.warning("Ignoring unknown log level %r, using WARNING", ignored)
    logger.debug("Logging has been configured.")
    return logger
