"""In-memory repositories for tests, demos and single-process use.

All repositories of one process share an `InMemoryAccountData` instance, which
plays the part of the database: units of work read from it and
`InMemoryUnitOfWork.commit()` writes to it under its lock. Reads hand out copies,
so edits a handler makes to a loaded entity stay private until committed.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import TypeVar

from accountcore.domain.entity import Entity
from accountcore.domain.tenants import Tenant, TenantId
from accountcore.domain.users import User, UserId
from accountcore.interfaces.repository import TenantRepository, UserRepository
from accountcore.interfaces.unit_of_work import ChangeSet

E = TypeVar("E", bound=Entity)


@dataclass(slots=True)
class InMemoryAccountData:
    """Shared in-memory backing store for the in-memory repositories.

    A single shared instance should be passed to every in-memory unit of work
    so that they operate on one data source, the way separate database
    sessions share one database. Entities are stored in their committed state,
    keyed by identifier.
    """

    tenants: dict[TenantId, Tenant] = field(default_factory=dict)
    users: dict[UserId, User] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)


def detached(entity: E) -> E:
    """Return a copy of a stored entity that can be edited without touching storage."""
    return replace(entity)


class InMemoryTenantRepository(TenantRepository):
    """Tenant repository reading from `InMemoryAccountData`."""

    def __init__(self, data: InMemoryAccountData, changes: ChangeSet) -> None:
        super().__init__(changes)
        self._data = data

    def _get(self, entity_id: TenantId) -> Tenant | None:
        with self._data.lock:
            tenant = self._data.tenants.get(entity_id)
            return detached(tenant) if tenant is not None else None


class InMemoryUserRepository(UserRepository):
    """User repository reading from `InMemoryAccountData`."""

    def __init__(self, data: InMemoryAccountData, changes: ChangeSet) -> None:
        super().__init__(changes)
        self._data = data

    def _get(self, entity_id: UserId) -> User | None:
        with self._data.lock:
            user = self._data.users.get(entity_id)
            return detached(user) if user is not None else None

    def _find_by_email(self, tenant_id: TenantId, email: str) -> list[User]:
        return [
            user
            for user in self._find_by_tenant(tenant_id)
            if user.email == email
        ]

    def _find_by_tenant(self, tenant_id: TenantId) -> list[User]:
        with self._data.lock:
            return [
                detached(user)
                for user in self._data.users.values()
                if user.tenant_id == tenant_id
            ]
