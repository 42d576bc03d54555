"""Logging configuration for the application."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import get_config


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: Optional[str] = None
) -> logging.Logger:
    """
    Setup a logger with console and optional file handlers.

    Args:
        name: Logger name
        log_file: Optional log file path
        level: Optional log level (overrides config)

    Returns:
        Configured logger instance
    """
    config = get_config()

    logger = logging.getLogger(name)
    log_level = level or config.logging.level
    logger.setLevel(getattr(logging, log_level.upper()))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(config.logging.format)

    # Console output stays quiet below WARNING so it doesn't interleave with CLI tables
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file and config.logging.to_file and not config.is_production:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.logging.max_bytes,
            backupCount=config.logging.backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_store_logger() -> logging.Logger:
    """Get logger for inventory store operations."""
    config = get_config()
    return setup_logger("inventory.store", config.logging.files.store)


def get_import_logger() -> logging.Logger:
    """Get logger for load/import/export operations."""
    config = get_config()
    return setup_logger("inventory.import", config.logging.files.imports)


def get_error_logger() -> logging.Logger:
    """Get logger for error tracking."""
    config = get_config()
    return setup_logger("inventory.error", config.logging.files.error, "ERROR")
