"""Global pytest fixtures for ACCOUNTCORE."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from accountcore.adapters.repositories.memory import InMemoryAccountData
from accountcore.domain.tenants import Tenant, TenantId
from accountcore.domain.users import User, UserId
from accountcore.interfaces.cancellation import CancellationToken

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=unused-argument

pytest_plugins = [
    "tests.fixtures.sqlite",
]

TESTS_ROOT = Path(__file__).parent.resolve()
#: Top-level test directories and the marker applied to everything below them.
DIRECTORY_MARKERS = ("unit", "contract", "integration")


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Mark each test after the top-level directory it lives in."""
    for item in items:
        try:
            top = item.path.resolve().relative_to(TESTS_ROOT).parts[0]
        except ValueError:
            continue
        if top in DIRECTORY_MARKERS and not any(
            marker.name == top for marker in item.iter_markers()
        ):
            item.add_marker(getattr(pytest.mark, top))


# Helper to route to an existing engine fixture by name
@pytest.fixture
def engine(request: pytest.FixtureRequest) -> Engine:
    """Indirection fixture to parametrize over engine-providing fixtures.

    Example:
        ```py
        @pytest.mark.parametrize("engine", ["sqlite_engine_memory", "sqlite_engine_file"], indirect=True)
        def test_something(engine): ...
        ```
    """
    return request.getfixturevalue(request.param)


@pytest.fixture
def token() -> CancellationToken:
    """A cancellation token nobody cancels."""
    return CancellationToken.none()


@pytest.fixture
def memory_data() -> InMemoryAccountData:
    """Fresh, empty in-memory account store."""
    return InMemoryAccountData()


@pytest.fixture
def make_tenant():
    """Factory for unsaved tenants."""

    def _make(name: str = "Acme") -> Tenant:
        return Tenant.create(TenantId.new_id(), name)

    return _make


@pytest.fixture
def make_user():
    """Factory for unsaved users of a given tenant."""

    def _make(tenant: Tenant, email: str | None = None, **kwargs) -> User:
        user_id = UserId.new_id()
        email = email or f"user-{user_id.value.lower()}@example.com"
        return User.create(user_id, tenant.id, email, **kwargs)

    return _make
