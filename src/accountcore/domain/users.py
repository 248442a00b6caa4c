"""User entity, its identifier and roles."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from accountcore.domain.entity import Entity, utc_now
from accountcore.domain.identifiers import StronglyTypedUlid
from accountcore.domain.tenants import TenantId

# Domain constraints
MAX_EMAIL_LENGTH = 100
MAX_NAME_LENGTH = 30
MAX_TITLE_LENGTH = 50


class UserId(StronglyTypedUlid):
    """Identifier of a user."""


class UserRole(Enum):
    """Role of a user within its tenant."""

    TENANT_USER = 0
    TENANT_ADMIN = 1
    TENANT_OWNER = 2


@dataclass(eq=False, kw_only=True)
class User(Entity[UserId]):
    """A person belonging to exactly one tenant.

    Business Rules:
    - Email is stored lower-cased and is unique within a tenant (enforced by the
      create-user handler and by the storage schema)
    - A user never moves between tenants
    """

    tenant_id: TenantId
    email: str
    role: UserRole = UserRole.TENANT_USER
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    email_confirmed: bool = False
    created_at: datetime = field(default_factory=utc_now)
    modified_at: datetime | None = None

    @classmethod
    def create(
        cls,
        user_id: UserId,
        tenant_id: TenantId,
        email: str,
        role: UserRole = UserRole.TENANT_USER,
    ) -> User:
        """Create a new, unconfirmed user."""
        return cls(id=user_id, tenant_id=tenant_id, email=email.lower(), role=role)

    def update(
        self, first_name: str | None, last_name: str | None, title: str | None
    ) -> None:
        """Replace the profile fields of the user."""
        self.first_name = first_name
        self.last_name = last_name
        self.title = title
        self.modified_at = utc_now()

    def change_role(self, role: UserRole) -> None:
        """Give the user a new role within its tenant."""
        self.role = role
        self.modified_at = utc_now()
