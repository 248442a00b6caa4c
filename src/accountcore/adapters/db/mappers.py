"""Mappers for table row <-> domain entity conversion.

Identifier columns are typed with `UlidIdType`, so rows already carry
`TenantId` / `UserId` values; the mappers only move attributes around.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from accountcore.domain.entity import Entity
from accountcore.domain.tenants import Tenant
from accountcore.domain.users import User

from .schema import tenants, users

if TYPE_CHECKING:
    from sqlalchemy import Row, Table

E = TypeVar("E", bound=Entity)


class EntityMapper(abc.ABC, Generic[E]):
    """Base class for row <-> entity mappers of one table."""

    table: ClassVar[Table]

    @abc.abstractmethod
    def to_domain(self, row: Row) -> E:
        """Convert a selected row to a domain entity."""

    @abc.abstractmethod
    def to_row(self, entity: E) -> dict[str, Any]:
        """Convert a domain entity to column values (without `version`)."""


class TenantMapper(EntityMapper[Tenant]):
    """Mapper for Tenant rows."""

    table = tenants

    def to_domain(self, row: Row) -> Tenant:
        return Tenant(
            id=row.id,
            name=row.name,
            state=row.state,
            created_at=row.created_at,
            modified_at=row.modified_at,
            version=row.version,
        )

    def to_row(self, entity: Tenant) -> dict[str, Any]:
        return {
            "id": entity.id,
            "name": entity.name,
            "state": entity.state,
            "created_at": entity.created_at,
            "modified_at": entity.modified_at,
        }


class UserMapper(EntityMapper[User]):
    """Mapper for User rows."""

    table = users

    def to_domain(self, row: Row) -> User:
        return User(
            id=row.id,
            tenant_id=row.tenant_id,
            email=row.email,
            role=row.role,
            first_name=row.first_name,
            last_name=row.last_name,
            title=row.title,
            email_confirmed=row.email_confirmed,
            created_at=row.created_at,
            modified_at=row.modified_at,
            version=row.version,
        )

    def to_row(self, entity: User) -> dict[str, Any]:
        return {
            "id": entity.id,
            "tenant_id": entity.tenant_id,
            "email": entity.email,
            "role": entity.role,
            "first_name": entity.first_name,
            "last_name": entity.last_name,
            "title": entity.title,
            "email_confirmed": entity.email_confirmed,
            "created_at": entity.created_at,
            "modified_at": entity.modified_at,
        }


#: Mapper per entity class, used by the unit of work when flushing.
MAPPERS: dict[type[Entity], EntityMapper] = {
    Tenant: TenantMapper(),
    User: UserMapper(),
}
