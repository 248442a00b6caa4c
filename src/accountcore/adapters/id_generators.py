"""ID generators for ACCOUNTCORE."""

import threading

from accountcore.domain.identifiers import ULID_LENGTH, new_ulid_text
from accountcore.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Thread-safe monotonic ULID generator.

    ULIDs are unique, lexicographically sortable identifiers.
    They consist of a 48-bit millisecond timestamp and 80 random bits.
    This generator uses the `ulid-py` library to create ULIDs; within one
    millisecond the monotonic provider increments the random part instead of
    drawing a new one, so ids keep their generation order. The provider is
    shared with `StronglyTypedUlid.new_id` and guarded by the same lock.
    """

    def new_id(self) -> str:
        """Generate a new ULID (serialized across threads)."""
        return new_ulid_text()


class SimpleIdGenerator(IdGenerator):
    """A simple ID generator that produces sequential, zero-padded IDs.

    The output is made of digits only, so it is still a valid ULID text (a
    timestamp of zero with a counter as randomness) and parses as any kind.

    Note:
        Not suitable for production use; primarily for deterministic tests.
    """

    def __init__(self, start: int = 0) -> None:
        self._counter = start
        self._lock = threading.Lock()

    def new_id(self) -> str:
        """Generate the next sequential identifier."""
        with self._lock:
            self._counter += 1
            return f"{self._counter:0{ULID_LENGTH}d}"
