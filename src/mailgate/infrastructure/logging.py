"""Loguru configuration shared by the CLI and the API lifespan."""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_configured_level: str | None = None


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with the service format. Idempotent per level."""
    global _configured_level
    level = level.upper()
    if _configured_level == level:
        return
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)
    _configured_level = level
