"""Logging configuration helpers."""
from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default handler with a single stdout sink at ``level``."""
    logger.remove()
    logger.add(sink=sys.stdout, level=level.upper(), format=LOG_FORMAT, colorize=None)
