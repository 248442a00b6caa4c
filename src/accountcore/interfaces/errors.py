"""Storage error taxonomy shared by every repository and unit-of-work adapter.

These are infrastructure faults, not business outcomes. They propagate past the
command handlers; the message bus only maps a `ConcurrencyConflictError` raised
while committing into a conflict result.

- `ConcurrencyConflictError`: the staged write no longer matches the stored state
  (stale version token, duplicate key). Retrying the same write will fail again;
  reload and re-run the command instead.
- `StoreUnavailableError`: transient driver/connection/timeout issues. Reads may
  be retried; writes only with a de-duplication key.
"""


class StorageError(Exception):
    """Base class for storage errors."""


class ConcurrencyConflictError(StorageError):
    """A staged write conflicts with the stored state.

    Attributes:
        kind (str): The entity kind (e.g. "User").
        entity_id (str): Identifier of the conflicting entity.
        expected_version (int | None): Version the write was based on, if any.
    """

    def __init__(
        self,
        kind: str,
        entity_id: str,
        expected_version: int | None = None,
        reason: str | None = None,
    ) -> None:
        message = f"{kind} ({entity_id}) write conflict"
        if expected_version is not None:
            message += f": expected version {expected_version}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.kind = kind
        self.entity_id = entity_id
        self.expected_version = expected_version


class StoreUnavailableError(StorageError):
    """Operational/timeout/connection errors; callers may retry reads."""
