"""
Logging setup for the application.
"""

import os
import time
import logging
import logging.handlers
from functools import wraps

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)-32s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """
    Configure the root logger.

    Args:
        level: Level name for the root logger and console
        log_file: Optional path for a rotating DEBUG-level log file
        max_size_mb: Rotation size of the log file
        backup_count: Rotated files to keep

    Returns:
        The root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    return root_logger


def log_timing(func):
    """Decorator to log function execution time at DEBUG."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
