"""Module defining Commands."""

from dataclasses import dataclass

from accountcore.domain.tenants import TenantId, TenantState
from accountcore.domain.users import UserId, UserRole


@dataclass(frozen=True)
class Command:
    """Base class for all commands."""


# --- Tenants ---


@dataclass(frozen=True)
class CreateTenant(Command):
    """Command to create a new tenant in the trial state."""

    name: str


@dataclass(frozen=True)
class RenameTenant(Command):
    """Command to change the display name of a tenant."""

    tenant_id: TenantId
    name: str


@dataclass(frozen=True)
class ChangeTenantState(Command):
    """Command to move a tenant to another lifecycle state."""

    tenant_id: TenantId
    state: TenantState


@dataclass(frozen=True)
class DeleteTenant(Command):
    """Command to delete a tenant that no longer has users."""

    tenant_id: TenantId


# --- Users ---


@dataclass(frozen=True)
class CreateUser(Command):
    """Command to create a user inside an existing tenant."""

    tenant_id: TenantId
    email: str
    role: UserRole = UserRole.TENANT_USER


@dataclass(frozen=True)
class UpdateUser(Command):
    """Command to replace a user's profile fields."""

    user_id: UserId
    first_name: str | None
    last_name: str | None
    title: str | None


@dataclass(frozen=True)
class ChangeUserRole(Command):
    """Command to change the role of a user."""

    user_id: UserId
    role: UserRole


@dataclass(frozen=True)
class DeleteUser(Command):
    """Command to delete a user by id."""

    user_id: UserId
