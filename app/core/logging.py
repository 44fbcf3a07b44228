"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Configure application-wide logging.

    Level comes from settings.log_level when set; otherwise DEBUG when
    settings.debug is True, else INFO. Output goes to stdout.
    """
    settings = get_settings()
    if settings.log_level:
        log_level = logging.getLevelName(settings.log_level.upper())
    else:
        log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
