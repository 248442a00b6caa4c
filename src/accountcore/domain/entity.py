"""Base class for all entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, TypeVar

from accountcore.domain.identifiers import StronglyTypedUlid

IdT = TypeVar("IdT", bound=StronglyTypedUlid)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(eq=False, kw_only=True)
class Entity(Generic[IdT]):
    """Generic base class for entities keyed by a strongly-typed identifier.

    Two entities are equal when they are of the same class and share an id,
    regardless of their other attributes.

    Attributes:
        id: The identifier; assigned at creation and never changed.
        version: Row token used for optimistic concurrency. `0` until the entity
            has been committed for the first time; the unit of work advances it
            on every committed write.
    """

    id: IdT
    version: int = field(default=0)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.id == other.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.id))
