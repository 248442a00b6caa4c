"""Unit of Work interface for ACCOUNTCORE.

Defines the AbstractUnitOfWork contract: a context-managed unit of work exposing
the repositories and the `ChangeSet` they stage writes into, with abstract
commit/rollback methods.

Writes follow a mark-then-commit pattern. `Repository.add/update/remove` only
record a `StagedChange`; nothing reaches storage until `commit()` flushes the
whole change set in one transaction. Leaving the context without committing
discards everything that was staged.
"""

from __future__ import annotations

import abc
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from accountcore.domain.entity import Entity
    from accountcore.domain.identifiers import StronglyTypedUlid

    from .repository import TenantRepository, UserRepository

E = TypeVar("E", bound="Entity")


class ChangeKind(Enum):
    """Kinds of staged writes."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class StagedChange:
    """A write waiting for the unit of work to commit."""

    kind: ChangeKind
    entity: Entity


class ChangeSet:
    """Ordered staged writes, at most one per entity.

    Staging a second write for an entity folds it into the first one:

    | staged   | then     | result                  |
    |----------|----------|-------------------------|
    | ADD      | UPDATE   | ADD (latest state)      |
    | ADD      | REMOVE   | nothing staged          |
    | UPDATE   | UPDATE   | UPDATE (latest state)   |
    | UPDATE   | REMOVE   | REMOVE                  |

    Anything else (adding twice, adding over an update, writing after a removal)
    is a programming error and raises `ValueError`. Folded changes keep the position
    of the first write, so flush order follows the order entities were first
    touched.
    """

    def __init__(self) -> None:
        self._changes: dict[StronglyTypedUlid, StagedChange] = {}

    def stage(self, kind: ChangeKind, entity: Entity) -> None:
        """Record a write for `entity`, folding it into any earlier one."""
        key = entity.id
        if (previous := self._changes.get(key)) is None:
            self._changes[key] = StagedChange(kind, entity)
            return

        match (previous.kind, kind):
            case (ChangeKind.ADD, ChangeKind.UPDATE):
                self._changes[key] = StagedChange(ChangeKind.ADD, entity)
            case (ChangeKind.ADD, ChangeKind.REMOVE):
                del self._changes[key]
            case (ChangeKind.UPDATE, ChangeKind.UPDATE | ChangeKind.REMOVE):
                self._changes[key] = StagedChange(kind, entity)
            case _:
                raise ValueError(
                    f"Cannot stage {kind.value} of {key!r}: "
                    f"already staged for {previous.kind.value}"
                )

    def find(self, entity_id: StronglyTypedUlid) -> StagedChange | None:
        """Return the change staged for `entity_id`, if any."""
        return self._changes.get(entity_id)

    def of_type(self, entity_cls: type[E]) -> list[StagedChange]:
        """Return the staged changes whose entity is an instance of `entity_cls`."""
        return [c for c in self._changes.values() if isinstance(c.entity, entity_cls)]

    def clear(self) -> None:
        """Forget every staged change."""
        self._changes.clear()

    def __iter__(self) -> Iterator[StagedChange]:
        return iter(list(self._changes.values()))

    def __len__(self) -> int:
        return len(self._changes)

    def __bool__(self) -> bool:
        return bool(self._changes)


class AbstractUnitOfWork(abc.ABC):
    """Contract for a transactional unit of work.

    One instance serves one command invocation. Implementations build the
    repositories and a fresh `ChangeSet` on `__enter__`.
    """

    users: UserRepository
    tenants: TenantRepository
    changes: ChangeSet

    def __enter__(self) -> AbstractUnitOfWork:
        """Enter the unit of work context and return the unit.

        Implementations may acquire transactional resources here.
        """
        return self

    def __exit__(self, *args):
        """Exit the unit of work context.

        Default behavior is to roll back on exit; after a successful commit
        there is nothing left to roll back.
        """
        self.rollback()

    @abc.abstractmethod
    def commit(self):
        """Flush every staged change atomically and finalize the transaction.

        Raises:
            ConcurrencyConflictError: If a staged write is based on a stale
                version or collides with a stored key. Nothing is written.
            StoreUnavailableError: On connectivity or timeout failures.
        """

    @abc.abstractmethod
    def rollback(self):
        """Discard staged changes and clean up transactional resources."""
