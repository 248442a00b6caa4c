"""Strongly-typed, time-sortable entity identifiers.

Every entity kind gets its own subclass of `StronglyTypedUlid` (e.g. `UserId`,
`TenantId`). The ULID value and its textual codec are shared; the subclass is the
kind tag, so a type checker rejects a `UserId` where a `TenantId` is expected and
two ids of different kinds never compare equal.

Text form: 26 Crockford base32 characters (``0-9 A-Z`` minus ``I L O U``), upper
case, safe in a URL path segment. The first 10 characters encode the creation
time in milliseconds, so lexicographic order follows creation order.
"""

from __future__ import annotations

import functools
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TypeVar

import ulid
from ulid import monotonic

from accountcore.domain.errors import IdentifierParseError

__all__ = ["ULID_LENGTH", "StronglyTypedUlid", "new_ulid_text"]

ULID_LENGTH = 26

# First character is limited to 0-7: anything larger overflows 128 bits.
_CANONICAL_ULID = re.compile(r"[0-7][0-9A-HJKMNP-TV-Z]{25}")

_generation_lock = threading.Lock()


def new_ulid_text() -> str:
    """Draw the next ULID from the process-wide monotonic provider.

    Every id in the process goes through here, typed or not, so they share one
    lock and one ordering.
    """
    with _generation_lock:
        return str(monotonic.new())


I = TypeVar("I", bound="StronglyTypedUlid")


@functools.total_ordering
@dataclass(frozen=True, eq=True, repr=False)
class StronglyTypedUlid:
    """Base class for ULID identifiers bound to one entity kind.

    Subclass once per kind; do not use the base class for entities directly.

    Example:
        ```py
        class UserId(StronglyTypedUlid):
            \"\"\"Identifier of a user.\"\"\"

        user_id = UserId.new_id()
        assert UserId.parse(str(user_id)) == user_id
        ```
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _CANONICAL_ULID.fullmatch(
            self.value
        ):
            raise IdentifierParseError(
                type(self).__name__,
                self.value,
                "expected a canonical (upper-case) 26-character ULID",
            )

    # --- Construction Paths ---

    @classmethod
    def new_id(cls: type[I]) -> I:
        """Generate a new identifier of this kind.

        Generation is monotonic within the process: ids created in the same
        millisecond increment the random part, so they never collide and keep
        their creation order.
        """
        return cls(new_ulid_text())

    @classmethod
    def parse(cls: type[I], text: object) -> I:
        """Parse external text (e.g. a URL path segment) into an identifier.

        Parsing is case-insensitive; the result is always canonical upper case.

        Raises:
            IdentifierParseError: If `text` is not a string of 26 Crockford
                base32 characters encoding a 128-bit value.
        """
        if not isinstance(text, str):
            raise IdentifierParseError(cls.__name__, text, "expected a string")
        if len(text) != ULID_LENGTH:
            raise IdentifierParseError(
                cls.__name__,
                text,
                f"expected {ULID_LENGTH} characters, got {len(text)}",
            )
        canonical = text.upper()
        if not _CANONICAL_ULID.fullmatch(canonical):
            raise IdentifierParseError(
                cls.__name__, text, "not a Crockford base32 encoded ULID"
            )
        return cls(canonical)

    @classmethod
    def try_parse(cls: type[I], text: object) -> I | None:
        """Like `parse`, but return None for malformed input."""
        try:
            return cls.parse(text)
        except IdentifierParseError:
            return None

    # --- Accessors ---

    @property
    def timestamp(self) -> datetime:
        """Creation time embedded in the identifier (UTC, millisecond precision)."""
        millis = ulid.from_str(self.value).timestamp().int
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)

    # --- Dunder ---

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.value < other.value  # type: ignore[attr-defined]

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"
