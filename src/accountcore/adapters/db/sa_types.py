"""Custom SQLAlchemy types for ACCOUNTCORE.

These types encapsulate small, backend-aware conversions while preserving clear
Python-side types for tooling and auto-generated API docs:

- `UlidIdType(SomeId)`: persists a strongly-typed identifier as its canonical
  26-character text, so indexes, filters and sorts on the column work on the
  time-ordered form.
- `UTCDateTime`: timezone-aware UTC datetimes on every backend.

`to_storage` / `from_storage` are the conversion functions behind `UlidIdType`;
they are usable on their own by code that handles raw rows.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import String
from sqlalchemy.types import DateTime, TypeDecorator

from accountcore.domain.errors import IdentifierConversionError, IdentifierParseError
from accountcore.domain.identifiers import ULID_LENGTH, StronglyTypedUlid

from .engine import DialectName

if TYPE_CHECKING:
    from sqlalchemy.engine.interfaces import Dialect

__all__ = ["UTCDateTime", "UlidIdType", "from_storage", "to_storage"]

I = TypeVar("I", bound=StronglyTypedUlid)


# ============================================================================
#                      Identifier <-> storage primitive
# ============================================================================


def to_storage(identifier: StronglyTypedUlid) -> str:
    """Return the storage primitive (canonical text) of an identifier.

    Raises:
        IdentifierConversionError: If `identifier` is not a strongly-typed id.
    """
    if not isinstance(identifier, StronglyTypedUlid):
        raise IdentifierConversionError(
            "StronglyTypedUlid",
            identifier,
            f"Expected a strongly-typed identifier, got {type(identifier).__name__}",
        )
    return identifier.value


def from_storage(raw: object, id_cls: type[I]) -> I:
    """Rebuild an identifier of kind `id_cls` from its storage primitive.

    Raises:
        IdentifierConversionError: If `raw` is not a well-formed ULID text.
    """
    try:
        return id_cls.parse(raw)
    except IdentifierParseError as e:
        raise IdentifierConversionError(
            id_cls.__name__, raw, f"Stored value {raw!r} is not a valid {id_cls.__name__}"
        ) from e


class UlidIdType(TypeDecorator[StronglyTypedUlid]):  # pylint: disable=too-many-ancestors
    """Column type for one identifier kind.

    Register it once per kind when declaring a table, e.g.
    ``Column("id", UlidIdType(UserId), primary_key=True)``. Binding an id of
    another kind raises, so a `TenantId` can never be written to a `UserId`
    column by accident.
    """

    impl = String(ULID_LENGTH)
    cache_ok = True

    def __init__(self, id_cls: type[StronglyTypedUlid]) -> None:
        super().__init__()
        self.id_cls = id_cls

    def process_bind_param(
        self, value: StronglyTypedUlid | None, dialect: Dialect
    ) -> str | None:
        if value is None:
            return None
        if type(value) is not self.id_cls:
            raise IdentifierConversionError(
                self.id_cls.__name__,
                value,
                f"Cannot bind {value!r} to a {self.id_cls.__name__} column",
            )
        return to_storage(value)

    def process_result_value(
        self, value: Any, dialect: Dialect
    ) -> StronglyTypedUlid | None:
        if value is None:
            return None
        return from_storage(value, self.id_cls)

    def process_literal_param(
        self, value: StronglyTypedUlid | None, dialect: Dialect
    ) -> Any:
        # same checks as binding
        return self.process_bind_param(value, dialect)

    @property
    def python_type(self) -> type[StronglyTypedUlid]:
        return self.id_cls


# ============================================================================
#                      Timestamps
# ============================================================================


class UTCDateTime(TypeDecorator[datetime]):  # pylint: disable=too-many-ancestors
    """Timezone-aware UTC datetime.

    Ensures values are stored and returned as aware ``datetime`` objects in UTC.
    Naive datetimes are treated as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        # SQLite has no timezone support: store naive UTC
        if dialect.name == DialectName.SQLITE.value:
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        return value

    def process_literal_param(self, value: datetime | None, dialect: Dialect) -> Any:
        return self.process_bind_param(value, dialect)

    @property
    def python_type(self) -> type[datetime]:
        return datetime
