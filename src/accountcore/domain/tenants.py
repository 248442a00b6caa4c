"""Tenant entity and its identifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from accountcore.domain.entity import Entity, utc_now
from accountcore.domain.identifiers import StronglyTypedUlid

MAX_TENANT_NAME_LENGTH = 30


class TenantId(StronglyTypedUlid):
    """Identifier of a tenant."""


class TenantState(Enum):
    """Lifecycle state of a tenant."""

    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"


@dataclass(eq=False, kw_only=True)
class Tenant(Entity[TenantId]):
    """An organisation owning a set of users."""

    name: str
    state: TenantState = TenantState.TRIAL
    created_at: datetime = field(default_factory=utc_now)
    modified_at: datetime | None = None

    @classmethod
    def create(cls, tenant_id: TenantId, name: str) -> Tenant:
        """Create a new tenant in the trial state."""
        return cls(id=tenant_id, name=name.strip())

    def rename(self, name: str) -> None:
        """Change the display name of the tenant."""
        self.name = name.strip()
        self.modified_at = utc_now()

    def change_state(self, state: TenantState) -> None:
        """Move the tenant to another lifecycle state."""
        self.state = state
        self.modified_at = utc_now()
