"""Fixtures for unit-of-work contract tests.

Every test runs against both adapters over storage shared by all the units of
work a test opens, so a second unit sees what the first one committed.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from accountcore.adapters.unit_of_work import InMemoryUnitOfWork, SqlAlchemyUnitOfWork

if TYPE_CHECKING:
    from accountcore.interfaces.unit_of_work import AbstractUnitOfWork


@pytest.fixture(params=["memory", "sqlite"])
def uow_factory(request: pytest.FixtureRequest) -> Callable[[], AbstractUnitOfWork]:
    """Return a factory of fresh units of work over one shared store.

    Supported params:
      - `"memory"` → InMemoryUnitOfWork over a shared InMemoryAccountData
      - `"sqlite"` → SqlAlchemyUnitOfWork over a file-backed SQLite engine
    """
    match request.param:
        case "memory":
            return functools.partial(
                InMemoryUnitOfWork, request.getfixturevalue("memory_data")
            )
        case "sqlite":
            return functools.partial(
                SqlAlchemyUnitOfWork, request.getfixturevalue("sqlite_engine_file")
            )
        case _:
            raise ValueError(f"unknown unit of work type: {request.param}")


@pytest.fixture
def saved_tenant(uow_factory, make_tenant):
    """A tenant committed to the store."""
    tenant = make_tenant()
    with uow_factory() as uow:
        uow.tenants.add(tenant)
        uow.commit()
    return tenant
