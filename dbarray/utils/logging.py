"""
Logging utilities for dbarray.

Every module logs through ``logging.getLogger(__name__)``, so all records
live under the ``dbarray`` logger. SQL text and bind renderings are logged
at DEBUG level by ``dbarray.base``; ``echo_sql`` turns just that on.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

# Default logging format
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

SQL_LOGGER = "dbarray.base"


def configure_logger(
    name: str = "dbarray",
    level: Union[int, str] = logging.INFO,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    max_bytes: int = 0,
    backup_count: int = 5,
    propagate: bool = True,
    echo_sql: bool = False,
) -> logging.Logger:
    """
    Configure the dbarray logger.

    Calling this more than once replaces the handlers it installed earlier
    instead of stacking duplicates.

    Args:
        name: Logger name
        level: Logging level (int or level name)
        log_format: Format string for log messages
        log_file: Path to a log file; no file handler when omitted
        log_to_console: Whether to log to stdout
        max_bytes: Rotate the log file at this size (0 disables rotation)
        backup_count: Number of rotated files to keep
        propagate: Whether to propagate to parent loggers
        echo_sql: Log every statement and its binds at DEBUG level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, "_dbarray", False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler._dbarray = True
        logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        if max_bytes:
            file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        else:
            file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler._dbarray = True
        logger.addHandler(file_handler)

    logger.propagate = propagate

    if echo_sql:
        logging.getLogger(SQL_LOGGER).setLevel(logging.DEBUG)

    return logger


def get_logger(name: str = "dbarray") -> logging.Logger:
    """
    Get a logger, configuring the dbarray defaults if nothing is set up yet.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers and not logging.getLogger().handlers:
        configure_logger(name)
    return logger
