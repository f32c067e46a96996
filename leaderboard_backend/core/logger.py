"""Logging setup shared by the application entry points."""

from __future__ import annotations

import logging
import sys

from .config import LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Configure the package logger once with a console handler."""

    logger = logging.getLogger("leaderboard_backend")
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["setup_logging"]
