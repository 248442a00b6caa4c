"""Test the bootstrap function."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from unittest import mock

import pytest

from accountcore.adapters.id_generators import SimpleIdGenerator
from accountcore.adapters.unit_of_work import InMemoryUnitOfWork, SqlAlchemyUnitOfWork
from accountcore.bootstrap import (
    AppContainer,
    bootstrap,
    build_in_memory_bus,
    build_message_bus,
    build_uow_factory,
    inject_dependencies,
)
from accountcore.config import DatabaseUrlNotSetError
from accountcore.domain.tenants import TenantId
from accountcore.interfaces.unit_of_work import AbstractUnitOfWork
from accountcore.service_layer.commands import Command, CreateTenant, CreateUser
from accountcore.service_layer.result import Result, success

# pylint: disable=redefined-outer-name
# pylint: disable=unused-argument
# pylint: disable=too-few-public-methods
# pylint: disable=magic-value-comparison


@pytest.fixture()
def setenvvar(monkeypatch, tmp_path):
    """Fixture to set environment variables for tests."""
    with mock.patch.dict(os.environ):
        envvars = {
            "ACCOUNTCORE_DB_URL": f"sqlite+pysqlite:///{tmp_path / 'accounts.db'}",
        }
        for k, v in envvars.items():
            monkeypatch.setenv(k, v)
        yield


class FakeUnitOfWork(AbstractUnitOfWork):
    """A test unit of work for testing purposes."""

    def __init__(self):
        self.committed = False

    def commit(self):
        self.committed = True

    def rollback(self):
        pass


@dataclass(frozen=True)
class CustomCommand(Command):
    """A custom command for testing."""


class TestBuildUoWFactory:
    """Tests for the build_uow_factory function."""

    @staticmethod
    def test_returns_fresh_sqlalchemy_uows(sqlite_engine_memory):
        """Each call builds a new SqlAlchemyUnitOfWork on the given engine."""
        factory = build_uow_factory(sqlite_engine_memory)
        first, second = factory(), factory()
        assert isinstance(first, SqlAlchemyUnitOfWork)
        assert first is not second
        assert first.engine is sqlite_engine_memory


class TestBuildMessageBus:
    """Tests for the build_message_bus function."""

    @staticmethod
    def test_injects_id_generator():
        """Handlers declaring `id_generator` receive the one given to the bus."""
        uows: list[FakeUnitOfWork] = []
        seen = []

        def sample_handler(cmd, uow, cancel_token, id_generator) -> Result:
            seen.append(id_generator)
            return success(None)

        def factory():
            uows.append(FakeUnitOfWork())
            return uows[-1]

        id_generator = SimpleIdGenerator()
        command_handlers: dict[type[Command], Callable[..., Result]] = {
            CustomCommand: sample_handler,
        }

        bus = build_message_bus(factory, command_handlers, id_generator)
        bus.handle(CustomCommand())

        assert seen == [id_generator]
        assert uows[0].committed is True

    @staticmethod
    def test_forwards_message_to_handler():
        """Test that the message bus forwards messages to the correct handler."""
        handled_commands = []

        def sample_handler(cmd: CustomCommand, uow, cancel_token) -> Result:
            handled_commands.append(cmd)
            return success(None)

        command_handlers: dict[type[Command], Callable[..., Result]] = {
            CustomCommand: sample_handler,
        }

        bus = build_message_bus(FakeUnitOfWork, command_handlers, SimpleIdGenerator())
        command_instance = CustomCommand()
        bus.handle(command_instance)

        assert len(handled_commands) == 1
        assert handled_commands[0] is command_instance


class TestInjectDependencies:
    """Tests for inject_dependencies."""

    @staticmethod
    def test_only_declared_parameters_are_bound():
        def handler(cmd, uow, cancel_token, id_generator):
            return id_generator

        def bare(cmd, uow, cancel_token):
            return None

        deps = {"id_generator": "gen", "clock": "tick"}

        assert inject_dependencies(handler, deps).keywords == {"id_generator": "gen"}
        assert inject_dependencies(bare, deps).keywords == {}


class TestBuildInMemoryBus:
    """Tests for build_in_memory_bus."""

    @staticmethod
    def test_runs_commands_against_shared_data(memory_data):
        bus = build_in_memory_bus(memory_data, SimpleIdGenerator())
        assert isinstance(bus.uow_factory(), InMemoryUnitOfWork)

        tenant_id = bus.handle(CreateTenant("Acme")).unwrap()
        user_id = bus.handle(CreateUser(tenant_id, "ada@example.com")).unwrap()

        assert isinstance(tenant_id, TenantId)
        assert tenant_id in memory_data.tenants
        assert user_id in memory_data.users


class TestBootstrap:
    """Tests for the bootstrap function."""

    @staticmethod
    def test_returns_app_container(setenvvar):
        """Test that bootstrap returns an AppContainer instance."""
        app_container = bootstrap(create_schema=True, setup_logging=False)
        assert isinstance(app_container, AppContainer)
        assert app_container.message_bus is not None
        app_container.engine.dispose()

    @staticmethod
    def test_message_bus_uses_sqlalchemy_uow(setenvvar):
        """Each command runs in a SqlAlchemyUnitOfWork on the container's engine."""
        app_container = bootstrap(create_schema=True, setup_logging=False)
        uow = app_container.message_bus.uow_factory()
        assert isinstance(uow, SqlAlchemyUnitOfWork)
        assert uow.engine is app_container.engine
        app_container.engine.dispose()

    @staticmethod
    def test_commands_reach_the_database(setenvvar, token):
        app_container = bootstrap(create_schema=True, setup_logging=False)
        bus = app_container.message_bus

        tenant_id = bus.handle(CreateTenant("Acme")).unwrap()

        with bus.uow_factory() as uow:
            assert uow.tenants.get_by_id(tenant_id, token).name == "Acme"
        app_container.engine.dispose()

    @staticmethod
    def test_missing_db_url(monkeypatch):
        monkeypatch.delenv("ACCOUNTCORE_DB_URL", raising=False)
        with pytest.raises(DatabaseUrlNotSetError):
            bootstrap(setup_logging=False)
