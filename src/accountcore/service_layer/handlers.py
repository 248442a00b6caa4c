"""Service layer handlers.

Each handler runs one command against the unit of work it is given and returns a
`Result`. Expected divergences (bad input, missing entities, taken keys) become
result variants; storage faults and cancellation propagate. Handlers only stage
writes: the message bus owns the unit of work and commits it when the result is
a success.
"""

import logging
import re
from collections.abc import Callable

from accountcore.domain.tenants import MAX_TENANT_NAME_LENGTH, Tenant, TenantId
from accountcore.domain.users import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TITLE_LENGTH,
    User,
    UserId,
)
from accountcore.interfaces.cancellation import CancellationToken
from accountcore.interfaces.id_generator import IdGenerator
from accountcore.interfaces.unit_of_work import AbstractUnitOfWork

from . import commands
from .result import (
    FieldError,
    Result,
    conflict,
    no_content,
    not_found,
    success,
    validation_error,
)

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ============================================================================
#                   Validation helpers
# ============================================================================


def _check_length(
    errors: list[FieldError], name: str, value: str | None, max_length: int
) -> None:
    if value is not None and len(value) > max_length:
        errors.append(
            FieldError(name, f"{name} must be no longer than {max_length} characters.")
        )


def _validate_email(email: str) -> list[FieldError]:
    errors: list[FieldError] = []
    if not email:
        errors.append(FieldError("email", "email is required."))
    elif not _EMAIL_RE.match(email):
        errors.append(FieldError("email", "email is not a valid email address."))
    _check_length(errors, "email", email, MAX_EMAIL_LENGTH)
    return errors


def _validate_tenant_name(name: str) -> list[FieldError]:
    errors: list[FieldError] = []
    if not name:
        errors.append(FieldError("name", "name is required."))
    _check_length(errors, "name", name, MAX_TENANT_NAME_LENGTH)
    return errors


def _user_not_found(user_id: UserId) -> Result:
    return not_found(f"User with id '{user_id}' not found.")


def _tenant_not_found(tenant_id: TenantId) -> Result:
    return not_found(f"Tenant with id '{tenant_id}' not found.")


# ============================================================================
#                   Tenant Handlers
# ============================================================================


def create_tenant(
    cmd: commands.CreateTenant,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
    id_generator: IdGenerator,
) -> Result[TenantId]:
    """Create a tenant and return its new id."""
    name = cmd.name.strip() if cmd.name else ""
    if errors := _validate_tenant_name(name):
        return validation_error(errors)

    cancel_token.raise_if_cancelled()
    tenant_id = TenantId.parse(id_generator.new_id())
    uow.tenants.add(Tenant.create(tenant_id, name))
    logger.debug("CreateTenant: staged tenant %s (%s)", tenant_id, name)
    return success(tenant_id)


def rename_tenant(
    cmd: commands.RenameTenant,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
) -> Result[None]:
    """Change the display name of a tenant."""
    name = cmd.name.strip() if cmd.name else ""
    if errors := _validate_tenant_name(name):
        return validation_error(errors)

    tenant = uow.tenants.get_by_id(cmd.tenant_id, cancel_token)
    if tenant is None:
        return _tenant_not_found(cmd.tenant_id)

    tenant.rename(name)
    uow.tenants.update(tenant)
    logger.debug("RenameTenant: staged rename of %s to %s", tenant.id, name)
    return no_content()


def change_tenant_state(
    cmd: commands.ChangeTenantState,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
) -> Result[None]:
    """Move a tenant to another lifecycle state."""
    tenant = uow.tenants.get_by_id(cmd.tenant_id, cancel_token)
    if tenant is None:
        return _tenant_not_found(cmd.tenant_id)

    if tenant.state is cmd.state:
        logger.debug("ChangeTenantState %s: state unchanged; noop", tenant.id)
        return no_content()

    tenant.change_state(cmd.state)
    uow.tenants.update(tenant)
    return no_content()


def delete_tenant(
    cmd: commands.DeleteTenant,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
) -> Result[None]:
    """Delete a tenant that has no users left."""
    tenant = uow.tenants.get_by_id(cmd.tenant_id, cancel_token)
    if tenant is None:
        return _tenant_not_found(cmd.tenant_id)

    if uow.users.list_by_tenant(tenant.id, cancel_token, limit=1):
        return conflict(f"Tenant with id '{tenant.id}' still has users.")

    uow.tenants.remove(tenant)
    logger.debug("DeleteTenant: staged removal of %s", tenant.id)
    return no_content()


# ============================================================================
#                   User Handlers
# ============================================================================


def create_user(
    cmd: commands.CreateUser,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
    id_generator: IdGenerator,
) -> Result[UserId]:
    """Create a user in an existing tenant and return its new id."""
    email = cmd.email.strip() if cmd.email else ""
    if errors := _validate_email(email):
        return validation_error(errors)

    tenant = uow.tenants.get_by_id(cmd.tenant_id, cancel_token)
    if tenant is None:
        return _tenant_not_found(cmd.tenant_id)

    email = email.lower()
    if uow.users.get_by_email(tenant.id, email, cancel_token) is not None:
        return conflict(f"The email '{email}' is already in use by another user.")

    user_id = UserId.parse(id_generator.new_id())
    uow.users.add(User.create(user_id, tenant.id, email, cmd.role))
    logger.debug("CreateUser: staged user %s in tenant %s", user_id, tenant.id)
    return success(user_id)


def update_user(
    cmd: commands.UpdateUser,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
) -> Result[None]:
    """Replace the profile fields of a user."""
    errors: list[FieldError] = []
    _check_length(errors, "first_name", cmd.first_name, MAX_NAME_LENGTH)
    _check_length(errors, "last_name", cmd.last_name, MAX_NAME_LENGTH)
    _check_length(errors, "title", cmd.title, MAX_TITLE_LENGTH)
    if errors:
        return validation_error(errors)

    user = uow.users.get_by_id(cmd.user_id, cancel_token)
    if user is None:
        return _user_not_found(cmd.user_id)

    user.update(cmd.first_name, cmd.last_name, cmd.title)
    uow.users.update(user)
    return no_content()


def change_user_role(
    cmd: commands.ChangeUserRole,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
) -> Result[None]:
    """Give a user a new role."""
    user = uow.users.get_by_id(cmd.user_id, cancel_token)
    if user is None:
        return _user_not_found(cmd.user_id)

    if user.role is cmd.role:
        logger.debug("ChangeUserRole %s: role unchanged; noop", user.id)
        return no_content()

    user.change_role(cmd.role)
    uow.users.update(user)
    return no_content()


def delete_user(
    cmd: commands.DeleteUser,
    uow: AbstractUnitOfWork,
    cancel_token: CancellationToken,
) -> Result[None]:
    """Delete a user by id."""
    user = uow.users.get_by_id(cmd.user_id, cancel_token)
    if user is None:
        return _user_not_found(cmd.user_id)

    uow.users.remove(user)
    logger.debug("DeleteUser: staged removal of %s", user.id)
    return no_content()


COMMAND_HANDLERS: dict[type[commands.Command], Callable[..., Result]] = {
    commands.CreateTenant: create_tenant,
    commands.RenameTenant: rename_tenant,
    commands.ChangeTenantState: change_tenant_state,
    commands.DeleteTenant: delete_tenant,
    commands.CreateUser: create_user,
    commands.UpdateUser: update_user,
    commands.ChangeUserRole: change_user_role,
    commands.DeleteUser: delete_user,
}
