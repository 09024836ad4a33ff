"""
Logging configuration.

Usage:
    from config.logging_config import get_logger
    logger = get_logger(__name__)

Entry points (CLI scripts) call setup_logging() once; library modules
only ever call get_logger().
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> None:
    """
    Configure the root logger with a console handler and an optional
    rotating file handler.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_file: File to log to. Defaults to <logs_dir>/catalog_export.log
            when settings.log_to_file is enabled.
    """
    global _configured
    if _configured:
        return

    from config.settings import settings

    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file is None and settings.log_to_file:
        log_file = settings.logs_dir / "catalog_export.log"

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
