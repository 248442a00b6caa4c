"""Repository contracts: load and stage writes of entities by identifier.

Command handlers depend on these abstractions only. A repository reads through
to its storage adapter but answers from the unit of work's `ChangeSet` first, so
a handler sees its own staged writes (a staged removal reads as absent).

Lookups return ``None`` when nothing matches; "not found" is an expected outcome
here, not an error. Storage faults are raised as `StorageError` subclasses and
are never swallowed.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Generic, TypeVar

from accountcore.domain.entity import Entity
from accountcore.domain.identifiers import StronglyTypedUlid
from accountcore.domain.tenants import Tenant, TenantId
from accountcore.domain.users import User, UserId

from .unit_of_work import ChangeKind

if TYPE_CHECKING:
    from .cancellation import CancellationToken
    from .unit_of_work import ChangeSet

E = TypeVar("E", bound=Entity)
I = TypeVar("I", bound=StronglyTypedUlid)


# ============================================================================
#                      Generic Staging Repository
# ============================================================================


class Repository(abc.ABC, Generic[E, I]):
    """Contract for loading entities by id and staging writes.

    Concrete adapters implement `_get`; staging is shared.
    """

    entity_cls: type[E]

    def __init__(self, changes: ChangeSet) -> None:
        self._changes = changes

    # --- Loads ---

    def get_by_id(self, entity_id: I, cancel_token: CancellationToken) -> E | None:
        """Get an entity from its ID.

        Args:
            entity_id: The ID of the entity to retrieve.
            cancel_token: Checked before touching storage.
        Raises:
            OperationCancelledError: If the token has been cancelled.
            StorageError: If the storage adapter fails.
        Returns:
            The entity, or None if there is no entity with that ID.
        """
        cancel_token.raise_if_cancelled()
        if (staged := self._changes.find(entity_id)) is not None:
            if staged.kind is ChangeKind.REMOVE:
                return None
            return staged.entity  # type: ignore[return-value]
        return self._get(entity_id)

    @abc.abstractmethod
    def _get(self, entity_id: I) -> E | None:
        """Read the committed state of an entity from storage."""

    # --- Staged writes ---

    def add(self, entity: E) -> None:
        """Mark a new entity for insertion on commit."""
        self._changes.stage(ChangeKind.ADD, entity)

    def update(self, entity: E) -> None:
        """Mark a loaded entity for update on commit."""
        self._changes.stage(ChangeKind.UPDATE, entity)

    def remove(self, entity: E) -> None:
        """Mark a loaded entity for deletion on commit."""
        self._changes.stage(ChangeKind.REMOVE, entity)

    # --- Helpers for adapters ---

    def _overlay(self, stored: list[E]) -> list[E]:
        """Apply staged writes of this repository's entity type to a stored list.

        Removed entities are dropped, updated ones replaced and added ones
        appended. Callers filter and sort the result.
        """
        staged = {c.entity.id: c for c in self._changes.of_type(self.entity_cls)}
        merged: list[E] = []
        for entity in stored:
            if (change := staged.pop(entity.id, None)) is None:
                merged.append(entity)
            elif change.kind is not ChangeKind.REMOVE:
                merged.append(change.entity)  # type: ignore[arg-type]
        merged.extend(
            change.entity  # type: ignore[misc]
            for change in staged.values()
            if change.kind is ChangeKind.ADD
        )
        return merged


# ============================================================================
#                      Entity-specific contracts
# ============================================================================


class TenantRepository(Repository[Tenant, TenantId]):
    """Repository of tenants."""

    entity_cls = Tenant


class UserRepository(Repository[User, UserId]):
    """Repository of users."""

    entity_cls = User

    def get_by_email(
        self, tenant_id: TenantId, email: str, cancel_token: CancellationToken
    ) -> User | None:
        """Find the user of a tenant with the given email (case-insensitive)."""
        cancel_token.raise_if_cancelled()
        email = email.lower()
        matches = [
            user
            for user in self._overlay(self._find_by_email(tenant_id, email))
            if user.tenant_id == tenant_id and user.email == email
        ]
        return matches[0] if matches else None

    def list_by_tenant(
        self,
        tenant_id: TenantId,
        cancel_token: CancellationToken,
        limit: int | None = None,
    ) -> list[User]:
        """List the users of a tenant, most recently created first.

        Creation order is the identifier order, so this is a plain descending
        sort on the stored id.
        """
        cancel_token.raise_if_cancelled()
        if limit is not None and limit < 1:
            raise ValueError("limit cannot be <= 0")
        users = [
            user
            for user in self._overlay(self._find_by_tenant(tenant_id))
            if user.tenant_id == tenant_id
        ]
        users.sort(key=lambda user: user.id.value, reverse=True)
        return users if limit is None else users[:limit]

    @abc.abstractmethod
    def _find_by_email(self, tenant_id: TenantId, email: str) -> list[User]:
        """Read committed users of a tenant with the given (lower-cased) email."""

    @abc.abstractmethod
    def _find_by_tenant(self, tenant_id: TenantId) -> list[User]:
        """Read all committed users of a tenant."""

