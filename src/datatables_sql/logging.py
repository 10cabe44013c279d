"""
Logging helpers.

Library code logs through ``logging.getLogger(__name__)`` loggers, or through
a logger handed in by the caller. Nothing here touches the root logger.
"""

import logging
import sys
from typing import Optional

from .config import DataTablesSettings, get_settings

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str = "datatables_sql",
    level: Optional[str] = None,
    format: str = DEFAULT_FORMAT,
    settings: Optional[DataTablesSettings] = None,
) -> logging.Logger:
    """
    Attach a stdout handler to the named logger.

    Args:
        name: Logger name
        level: Logging level; defaults to settings.LOG_LEVEL
        format: Log message format
        settings: Settings to read the default level from

    Returns:
        Configured logger instance
    """
    settings = settings or get_settings()
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(format))
    logger.addHandler(handler)

    return logger
