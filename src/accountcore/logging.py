"""Logging setup for processes hosting the ACCOUNTCORE message bus.

Two handlers hang off the root logger:

- a Rich console handler on stderr, at the level chosen by the host
  (``ACCOUNTCORE_LOG_LEVEL``), where records from libraries such as SQLAlchemy
  carry a short ``[sqlalchemy]`` tag;
- an optional flight recorder, a `MemoryHandler` keeping the last records of
  every level in memory and writing them to a file once a WARNING (a failed
  commit, a storage fault) comes through.

The root logger itself passes everything; each handler filters on its own level.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from importlib.metadata import version
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING

import sqlalchemy
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

# pylint: disable=too-few-public-methods

LOGGER_PREFIX = "accountcore"

CONSOLE_FORMAT = "%(library)s %(message)s"
VERBOSE_CONSOLE_FORMAT = "%(asctime)s %(name)s: %(message)s"
FLIGHT_RECORDER_FORMAT = (
    "[%(asctime)s] [%(process)d:%(threadName)s] "
    "%(levelname)s %(name)s:%(lineno)d: %(message)s"
)


class LibraryTagFilter(logging.Filter):
    """Set `record.library` to ``[top-level-name]`` for records not logged by us."""

    def filter(self, record: logging.LogRecord) -> bool:
        top = record.name.split(".", 1)[0]
        record.library = "" if top == LOGGER_PREFIX else f"[{top}]"
        return True


def console_handler(
    level: int = logging.INFO, *, verbose: bool = False, color: bool = True
) -> RichHandler:
    """Build the stderr handler.

    Args:
        level: Minimum level shown; ignored when `verbose` (always DEBUG).
        verbose: Show timestamps, logger names and source links.
        color: Let Rich pick a color system; plain text when False.
    """
    handler = RichHandler(
        level=logging.DEBUG if verbose else level,
        console=Console(color_system="auto" if color else None, stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=verbose,
        enable_link_path=verbose,
    )
    if verbose:
        handler.setFormatter(logging.Formatter(VERBOSE_CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handler.addFilter(LibraryTagFilter())
    return handler


def flight_recorder(
    path: Path, *, capacity: int = 2000, flush_level: int = logging.WARNING
) -> MemoryHandler:
    """Build a flight recorder buffering `capacity` records for `path`.

    The buffer is written out (and emptied) when it fills up or when a record at
    `flush_level` or above arrives. Records still buffered when the handler is
    closed are dropped.
    """
    target = logging.FileHandler(path, mode="w", encoding="utf-8")
    target.setLevel(logging.DEBUG)
    target.setFormatter(logging.Formatter(FLIGHT_RECORDER_FORMAT))
    return MemoryHandler(
        capacity, flushLevel=flush_level, target=target, flushOnClose=False
    )


def configure_logging(  # pylint: disable=too-many-arguments
    level: int = logging.WARNING,
    *,
    verbose: bool = False,
    color: bool = True,
    log_path: Path | None = None,
    flight_capacity: int = 2000,
    logger_levels: dict[str, int] | None = None,
) -> list[logging.Handler]:
    """Replace the root logger's handlers with the console and flight recorder.

    Args:
        level: Console level.
        verbose: Verbose console output, see `console_handler`.
        color: Colored console output.
        log_path: Turn the flight recorder on, writing to this file.
        flight_capacity: Records kept by the flight recorder.
        logger_levels: Levels set on named loggers, e.g. ``{"sqlalchemy": WARNING}``.

    Returns:
        The handlers now installed on the root logger.
    """
    handlers: list[logging.Handler] = [
        console_handler(level, verbose=verbose, color=color)
    ]
    if log_path is not None:
        handlers.append(flight_recorder(log_path, capacity=flight_capacity))

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, logger_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(logger_level)

    return handlers


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    log_path: Path | None,
    db_dialect: str,
    logger_levels: dict[str, int],
) -> None:
    """Log one INFO line describing the process, then DEBUG diagnostics."""
    logger.info(
        "ACCOUNTCORE %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        "ON" if log_path else "OFF",
    )

    diagnostics = {
        "Python": sys.version.split()[0],
        "Platform": f"{platform.system()} {platform.release()}",
        "PID": os.getpid(),
        "CWD": Path.cwd(),
        "SQLAlchemy": f"{sqlalchemy.__version__} (dialect {db_dialect})",
        "Rich": version("rich"),
        "Handlers": [type(h).__name__ for h in handlers],
    }
    if log_path:
        diagnostics["Flight recorder"] = log_path
    if logger_levels:
        diagnostics["Logger levels"] = {
            name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()
        }
    for key, value in diagnostics.items():
        logger.debug("%s: %s", key, value)
