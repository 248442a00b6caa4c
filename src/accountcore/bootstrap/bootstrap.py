"""Bootstrap the message bus with handlers and unit of work."""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from accountcore import __version__, config
from accountcore.adapters.db.engine import DialectName, make_engine
from accountcore.adapters.db.schema import metadata
from accountcore.adapters.id_generators import ULIDGenerator
from accountcore.adapters.repositories.memory import InMemoryAccountData
from accountcore.adapters.unit_of_work import InMemoryUnitOfWork, SqlAlchemyUnitOfWork
from accountcore.logging import configure_logging, log_startup
from accountcore.service_layer.handlers import COMMAND_HANDLERS
from accountcore.service_layer.messagebus import MessageBus

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from accountcore.interfaces.id_generator import IdGenerator
    from accountcore.interfaces.unit_of_work import AbstractUnitOfWork
    from accountcore.service_layer.commands import Command
    from accountcore.service_layer.result import Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """A class to hold application wiring constants."""

    message_bus: MessageBus
    engine: Engine


def build_uow_factory(engine: Engine) -> Callable[[], AbstractUnitOfWork]:
    """Build a factory returning a new SQLAlchemy unit of work per call."""
    return functools.partial(SqlAlchemyUnitOfWork, engine)


def build_message_bus(
    uow_factory: Callable[[], AbstractUnitOfWork],
    command_handlers: dict[type[Command], Callable[..., Result]],
    id_generator: IdGenerator,
) -> MessageBus:
    """Build a message bus with injected dependencies."""
    dependencies = {"id_generator": id_generator}
    injected_command_handlers = {
        command_type: inject_dependencies(handler, dependencies)
        for command_type, handler in command_handlers.items()
    }

    return MessageBus(
        uow_factory,
        command_handlers=injected_command_handlers,
    )


def build_in_memory_bus(
    data: InMemoryAccountData | None = None,
    id_generator: IdGenerator | None = None,
) -> MessageBus:
    """Build a message bus over in-memory storage (tests, demos)."""
    data = data if data is not None else InMemoryAccountData()
    return build_message_bus(
        functools.partial(InMemoryUnitOfWork, data),
        COMMAND_HANDLERS,
        id_generator or ULIDGenerator(),
    )


def bootstrap(
    *,
    create_schema: bool = False,
    log_path: Path | None = None,
    setup_logging: bool = True,
) -> AppContainer:
    """Bootstrap the message bus with handlers and a database-backed unit of work.

    Args:
        create_schema: Create missing tables with ``metadata.create_all``.
        log_path: Enable the flight recorder, writing to this file.
        setup_logging: Configure the root logger from `ACCOUNTCORE_LOG_LEVEL`.

    Raises:
        DatabaseUrlNotSetError: If `ACCOUNTCORE_DB_URL` is not set.
        ValueError: If `ACCOUNTCORE_LOG_LEVEL` is not a level name.
    """
    engine = make_engine(config.get_db_url())

    if setup_logging:
        level = config.get_log_level()
        handlers = configure_logging(
            level, log_path=log_path, logger_levels=config.DEFAULT_LIB_LEVELS
        )
        log_startup(
            logger,
            app_version=__version__,
            level=level,
            handlers=handlers,
            log_path=log_path,
            db_dialect=DialectName.of(engine).value,
            logger_levels=config.DEFAULT_LIB_LEVELS,
        )

    if create_schema:
        metadata.create_all(engine)
        logger.debug("Schema ensured on %s", engine.url.render_as_string())

    message_bus = build_message_bus(
        build_uow_factory(engine), COMMAND_HANDLERS, ULIDGenerator()
    )

    return AppContainer(
        message_bus=message_bus,
        engine=engine,
    )


def inject_dependencies(
    handler: Callable, dependencies: Mapping[str, object]
) -> Callable:
    """Inject dependencies into a handler function based on its parameters."""
    params = inspect.signature(handler).parameters
    deps = {
        name: dependency for name, dependency in dependencies.items() if name in params
    }
    return functools.partial(handler, **deps)
