"""
Logging utilities for the Taskboard API
"""
import logging
import sys
from typing import Optional

LOGGER_NAME = "taskboard"

_configured = False


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the application logger once and return it."""
    global _configured
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        ))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the application logger or one of its children."""
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_error(error: Exception, context: str, user_id: Optional[int] = None) -> None:
    """
    Log an unexpected error with its traceback.

    Args:
        error: The exception that was raised
        context: Where the error happened, usually "Class.method (details)"
        user_id: Acting user, if known
    """
    get_logger().error(
        "%s failed for user=%s: %s: %s",
        context,
        user_id if user_id is not None else "-",
        type(error).__name__,
        error,
        exc_info=(type(error), error, error.__traceback__),
    )


__all__ = ["setup_logging", "get_logger", "log_error"]
