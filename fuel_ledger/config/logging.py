"""
Logging configuration.

Configures loguru sinks for the API and the job workers.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from fuel_ledger.config.settings import settings


def setup_logging(component: str = "api") -> None:
    """
    Configure logger with stderr output and file rotation.

    Args:
        component: Process name written into every record
    """
    logger.remove()
    logger.configure(extra={"component": component})
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
            "{extra[component]} | <cyan>{name}</cyan>:<cyan>{line}</cyan> - {message}"
        ),
    )
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
        enqueue=True,
    )

    logger.info(f"Starting fuel ledger {component}...")
