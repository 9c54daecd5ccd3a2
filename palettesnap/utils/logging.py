"""
PaletteSnap Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Optional

from loguru import logger

from palettesnap.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"


def configure_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default sink with the structured stdout sink."""
    logger.remove()
    logger.add(
        sys.stdout,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        serialize=False  # Set to True for JSON output
    )
