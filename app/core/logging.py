"""Logging configuration based on loguru."""

import sys
from typing import Optional

from loguru import logger

from app.core.config import get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default sink with one honouring LOG_LEVEL."""
    level = (level or get_settings().log_level).upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=False)
    logger.debug(f"Logging configured at level {level}")
