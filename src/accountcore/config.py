"""Configuration utilities for ACCOUNTCORE.

This module centralizes small helpers and constants related to application
configuration. Settings come from the environment only:

- `ACCOUNTCORE_DB_URL`: SQLAlchemy URL of the account database (required).
- `ACCOUNTCORE_LOG_LEVEL`: console log level name (default ``WARNING``).
"""

import logging
import os

DB_URL_ENV = "ACCOUNTCORE_DB_URL"  # pragma: no mutate
LOG_LEVEL_ENV = "ACCOUNTCORE_LOG_LEVEL"  # pragma: no mutate
DEFAULT_LOG_LEVEL = logging.WARNING

#: Default levels for chatty third-party loggers.
DEFAULT_LIB_LEVELS = {"sqlalchemy": logging.WARNING}


class DatabaseUrlNotSetError(Exception):
    """Raised when the ACCOUNTCORE_DB_URL environment variable is not set."""


def get_db_url() -> str:
    """Get the database URL from the environment.

    Returns:
        The value of the `ACCOUNTCORE_DB_URL` environment variable.

    Raises:
        DatabaseUrlNotSetError: If `ACCOUNTCORE_DB_URL` is not set.
    """
    if not (url := os.environ.get(DB_URL_ENV)):
        raise DatabaseUrlNotSetError
    return url


def get_log_level() -> int:
    """Get the console log level from the environment.

    Returns:
        The numeric level named by `ACCOUNTCORE_LOG_LEVEL`, or WARNING if unset.

    Raises:
        ValueError: If the variable holds something that is not a level name.
    """
    if not (name := os.environ.get(LOG_LEVEL_ENV, "").strip()):
        return DEFAULT_LOG_LEVEL
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {name!r}")
    return level
