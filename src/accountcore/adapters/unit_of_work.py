"""Unit of Work adapters for ACCOUNTCORE.

Both adapters collect staged writes in a `ChangeSet` and apply them in one
atomic step on `commit()`:

- `SqlAlchemyUnitOfWork`: one Connection (and transaction) per context; every
  UPDATE and DELETE is guarded by the entity's version token.
- `InMemoryUnitOfWork`: applies the change set to a shared `InMemoryAccountData`
  under its lock, with the same conflict rules as the database schema.

Conflict rules (both adapters):

| Change | Raises `ConcurrencyConflictError` when                         |
|--------|----------------------------------------------------------------|
| ADD    | the id exists, the email is taken, or the tenant is missing    |
| UPDATE | the row is gone or its version differs from the loaded one     |
| REMOVE | the version differs, or a tenant still has users               |

Removing a row that is already gone is a no-op, so a retried removal succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError

from accountcore.adapters.db.mappers import MAPPERS
from accountcore.adapters.repositories.memory import (
    InMemoryAccountData,
    InMemoryTenantRepository,
    InMemoryUserRepository,
)
from accountcore.adapters.repositories.sqlalchemy_adapters import (
    SqlAlchemyTenantRepository,
    SqlAlchemyUserRepository,
)
from accountcore.domain.tenants import Tenant
from accountcore.domain.users import User
from accountcore.interfaces.errors import ConcurrencyConflictError, StoreUnavailableError
from accountcore.interfaces.unit_of_work import (
    AbstractUnitOfWork,
    ChangeKind,
    ChangeSet,
    StagedChange,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from accountcore.domain.entity import Entity

logger = logging.getLogger(__name__)


def _conflict(
    entity: Entity, reason: str, expected_version: int | None = None
) -> ConcurrencyConflictError:
    return ConcurrencyConflictError(
        kind=type(entity).__name__,
        entity_id=str(entity.id),
        expected_version=expected_version,
        reason=reason,
    )


def _advance_versions(staged: list[StagedChange]) -> None:
    """Bring the callers' entity objects in line with the committed rows."""
    for change in staged:
        if change.kind is ChangeKind.ADD:
            change.entity.version = 1
        elif change.kind is ChangeKind.UPDATE:
            change.entity.version += 1


# ============================================================================
#                              SQLAlchemy
# ============================================================================


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy-backed Unit of Work."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.connection: Connection

    def __enter__(self):
        try:
            self.connection = self.engine.connect()
        except DBAPIError as e:
            raise StoreUnavailableError(str(e)) from e
        self.changes = ChangeSet()
        self.tenants = SqlAlchemyTenantRepository(self.connection, self.changes)
        self.users = SqlAlchemyUserRepository(self.connection, self.changes)
        return super().__enter__()

    def __exit__(self, *args):
        try:
            super().__exit__(*args)
        finally:
            self.connection.close()

    def commit(self):
        staged = list(self.changes)
        try:
            for change in staged:
                self._flush(change)
            self.connection.commit()
        except ConcurrencyConflictError:
            self.connection.rollback()
            raise
        except IntegrityError as e:  # duplicate id/email, missing tenant, ...
            self.connection.rollback()
            raise ConcurrencyConflictError(
                kind="UnitOfWork",
                entity_id=", ".join(str(c.entity.id) for c in staged),
                reason=str(e.orig),
            ) from e
        except DBAPIError as e:  # OperationalError, InterfaceError, etc.
            self.connection.rollback()
            raise StoreUnavailableError(str(e)) from e

        logger.debug("Committed %d staged change(s)", len(staged))
        _advance_versions(staged)
        self.changes.clear()

    def rollback(self):
        if self.changes:
            logger.debug("Discarding %d staged change(s)", len(self.changes))
        self.changes.clear()
        self.connection.rollback()

    # --- Internals ---

    def _flush(self, change: StagedChange) -> None:
        entity = change.entity
        mapper = MAPPERS[type(entity)]
        table = mapper.table
        guard = (table.c.id == entity.id, table.c.version == entity.version)

        match change.kind:
            case ChangeKind.ADD:
                self.connection.execute(
                    insert(table).values(**mapper.to_row(entity), version=1)
                )
            case ChangeKind.UPDATE:
                values = mapper.to_row(entity)
                del values["id"]
                result = self.connection.execute(
                    update(table)
                    .where(*guard)
                    .values(**values, version=entity.version + 1)
                )
                if result.rowcount != 1:
                    raise _conflict(entity, "stale version", entity.version)
            case ChangeKind.REMOVE:
                result = self.connection.execute(delete(table).where(*guard))
                if result.rowcount != 1 and self._exists(entity):
                    raise _conflict(entity, "stale version", entity.version)

    def _exists(self, entity: Entity) -> bool:
        table = MAPPERS[type(entity)].table
        stmt = select(table.c.id).where(table.c.id == entity.id)
        return self.connection.execute(stmt).first() is not None


# ============================================================================
#                              In-memory
# ============================================================================


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """Unit of Work over a shared `InMemoryAccountData`.

    Note: commits are serialized by the data's lock, so concurrent units of work
    over the same data are safe; each one still sees only committed state plus
    its own staged changes.
    """

    def __init__(self, data: InMemoryAccountData | None = None) -> None:
        self.data = data if data is not None else InMemoryAccountData()

    def __enter__(self):
        self.changes = ChangeSet()
        self.tenants = InMemoryTenantRepository(self.data, self.changes)
        self.users = InMemoryUserRepository(self.data, self.changes)
        return super().__enter__()

    def commit(self):
        staged = list(self.changes)
        with self.data.lock:
            # apply to copies, swap in only if every change succeeds
            tenants = dict(self.data.tenants)
            users = dict(self.data.users)
            for change in staged:
                self._apply(change, tenants, users)
            self.data.tenants = tenants
            self.data.users = users

        logger.debug("Committed %d staged change(s)", len(staged))
        _advance_versions(staged)
        self.changes.clear()

    def rollback(self):
        if self.changes:
            logger.debug("Discarding %d staged change(s)", len(self.changes))
        self.changes.clear()

    # --- Internals ---

    @staticmethod
    def _apply(  # pylint: disable=too-many-branches
        change: StagedChange, tenants: dict, users: dict
    ) -> None:
        entity = change.entity
        bucket = tenants if isinstance(entity, Tenant) else users
        stored = bucket.get(entity.id)

        match change.kind:
            case ChangeKind.ADD:
                if stored is not None:
                    raise _conflict(entity, "duplicate id")
                if isinstance(entity, User):
                    if entity.tenant_id not in tenants:
                        raise _conflict(entity, f"unknown tenant {entity.tenant_id}")
                    InMemoryUnitOfWork._check_unique_email(entity, users)
                bucket[entity.id] = replace(entity, version=1)
            case ChangeKind.UPDATE:
                if stored is None or stored.version != entity.version:
                    raise _conflict(entity, "stale version", entity.version)
                if isinstance(entity, User):
                    InMemoryUnitOfWork._check_unique_email(entity, users)
                bucket[entity.id] = replace(entity, version=entity.version + 1)
            case ChangeKind.REMOVE:
                if stored is None:
                    return
                if stored.version != entity.version:
                    raise _conflict(entity, "stale version", entity.version)
                if isinstance(entity, Tenant) and any(
                    user.tenant_id == entity.id for user in users.values()
                ):
                    raise _conflict(entity, "tenant still has users")
                del bucket[entity.id]

    @staticmethod
    def _check_unique_email(user: User, users: dict) -> None:
        for other in users.values():
            if (
                other.id != user.id
                and other.tenant_id == user.tenant_id
                and other.email == user.email
            ):
                raise _conflict(user, f"email {user.email!r} already in use")
