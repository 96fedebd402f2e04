"""
Web Initialization - Logging Module.

Module: logging.py
Configures loguru logger for the HTTP server.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from affiliate.config.settings import settings


def setup_logging(
    log_file: str | None = None,
    level: str | None = None,
) -> None:
    """Configure stderr level and a rotating file sink."""
    level = level or settings.log_level

    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(
        log_file or settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=level,
        encoding="utf-8",
    )

    logger.info("Starting affiliate commission server...")
