"""
Centralized logging configuration.

Provides logging with:
- Rich console output (INFO or DEBUG based on environment)
- File output (always DEBUG for troubleshooting)

Usage:
    from rollsearch.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Scope loaded")
    logger.debug("Detailed debug info")  # Only shown when DEBUG=1
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from .config import get_config


def setup_logger(
    name: str = "rollsearch",
    log_dir: Optional[Path] = None,
    debug: Optional[bool] = None,
    log_to_file: Optional[bool] = None
) -> logging.Logger:
    """
    Setup and configure a logger.

    Args:
        name: Logger name (typically __name__)
        log_dir: Directory for log files (default from config)
        debug: Enable debug mode (default from environment/config)
        log_to_file: Whether to write logs to file (default from config)

    Returns:
        Configured logger instance
    """
    config = get_config()

    if debug is None:
        debug = config.debug
    if log_dir is None:
        log_dir = config.logs_dir
    if log_to_file is None:
        log_to_file = config.log_to_file

    level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)  # Capture all, filter at handler level
    logger.propagate = False

    console_handler = RichHandler(
        rich_tracebacks=True, show_time=True, show_level=True, show_path=False
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{datetime.now():%Y%m%d_%H%M%S}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

        logger.debug(f"Log file: {log_file}")

    return logger


# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str = "rollsearch") -> logging.Logger:
    """
    Get a logger instance.

    Creates and caches logger instances. Modules inside the package log
    through ``logging.getLogger(__name__)``; configuring the top-level
    ``rollsearch`` logger here routes all of them to the same handlers.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name not in _loggers:
        _loggers[name] = setup_logger(name)
    return _loggers[name]
