"""Repositories backed by SQLAlchemy Core.

Reads run on the unit of work's connection, inside its transaction. Driver
errors are mapped to `StoreUnavailableError`; writes are never issued here (the
unit of work flushes them on commit).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError

from accountcore.adapters.db.mappers import TenantMapper, UserMapper
from accountcore.adapters.db.schema import tenants, users
from accountcore.interfaces.errors import StoreUnavailableError
from accountcore.interfaces.repository import TenantRepository, UserRepository

if TYPE_CHECKING:
    from sqlalchemy import Row, Select
    from sqlalchemy.engine import Connection

    from accountcore.domain.tenants import Tenant, TenantId
    from accountcore.domain.users import User, UserId
    from accountcore.interfaces.unit_of_work import ChangeSet


def _fetch_all(connection: Connection, stmt: Select) -> list[Row]:
    try:
        return list(connection.execute(stmt).all())
    except DBAPIError as e:  # OperationalError, InterfaceError, etc.
        raise StoreUnavailableError(str(e)) from e


class SqlAlchemyTenantRepository(TenantRepository):
    """Tenant repository over the `tenants` table."""

    def __init__(self, connection: Connection, changes: ChangeSet) -> None:
        super().__init__(changes)
        self.connection = connection
        self.mapper = TenantMapper()

    def _get(self, entity_id: TenantId) -> Tenant | None:
        rows = _fetch_all(self.connection, select(tenants).where(tenants.c.id == entity_id))
        return self.mapper.to_domain(rows[0]) if rows else None


class SqlAlchemyUserRepository(UserRepository):
    """User repository over the `users` table."""

    def __init__(self, connection: Connection, changes: ChangeSet) -> None:
        super().__init__(changes)
        self.connection = connection
        self.mapper = UserMapper()

    def _get(self, entity_id: UserId) -> User | None:
        rows = _fetch_all(self.connection, select(users).where(users.c.id == entity_id))
        return self.mapper.to_domain(rows[0]) if rows else None

    def _find_by_email(self, tenant_id: TenantId, email: str) -> list[User]:
        stmt = select(users).where(
            users.c.tenant_id == tenant_id,
            users.c.email == email,
        )
        return [self.mapper.to_domain(row) for row in _fetch_all(self.connection, stmt)]

    def _find_by_tenant(self, tenant_id: TenantId) -> list[User]:
        stmt = (
            select(users)
            .where(users.c.tenant_id == tenant_id)
            .order_by(users.c.id.desc())
        )
        return [self.mapper.to_domain(row) for row in _fetch_all(self.connection, stmt)]
