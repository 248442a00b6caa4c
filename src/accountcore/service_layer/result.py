"""Result type for command outcomes.

A handler reports what happened by returning exactly one of the variants below
instead of raising for expected outcomes:

| Variant     | Meaning                                          |
|-------------|--------------------------------------------------|
| `Success`   | the operation succeeded and carries a value       |
| `NoContent` | the operation succeeded and has nothing to return |
| `NotFound`  | a referenced entity does not exist                |
| `Invalid`   | the input failed validation (field-level errors)  |
| `Conflict`  | the operation collides with the current state     |
| `Failure`   | the operation could not be completed              |

Construct results through the factory functions (`success`, `no_content`,
`not_found`, `validation_error`, `conflict`, `failure`). Consume them with
`match(...)`, which requires a callback for every variant, or with a `match`
statement over the variant classes.

Example:
    result = bus.handle(commands.DeleteUser(user_id))
    message = result.match(
        on_success=lambda _: "deleted",
        on_not_found=lambda msg: msg,
        on_validation=lambda errors: "; ".join(e.message for e in errors),
        on_conflict=lambda msg: msg,
        on_failure=lambda msg: msg,
    )

`unwrap()` is the only way to read a value without checking the variant first.
It raises `ResultUnwrapError` on anything but a success: that is a bug in the
caller, not an outcome to recover from.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

__all__ = [
    "Conflict",
    "Failure",
    "FieldError",
    "Invalid",
    "NoContent",
    "NotFound",
    "Result",
    "ResultUnwrapError",
    "Success",
    "conflict",
    "failure",
    "no_content",
    "not_found",
    "success",
    "validation_error",
]

T = TypeVar("T")  # Success value type
U = TypeVar("U")  # Mapped value type
R = TypeVar("R")  # Return type of match callbacks


class ResultUnwrapError(RuntimeError):
    """Raised when a value is read from a result that is not a success."""

    def __init__(self, result: object) -> None:
        super().__init__(f"Cannot unwrap a value from {result!r}")
        self.result = result


@dataclass(frozen=True, slots=True)
class FieldError:
    """A validation error attached to one input field."""

    field: str
    message: str


class _Outcome(abc.ABC, Generic[T]):
    """Operations shared by every result variant."""

    __slots__ = ()

    @abc.abstractmethod
    def is_success(self) -> bool:
        """Whether this is a `Success` (or `NoContent`)."""

    @abc.abstractmethod
    def match(  # pylint: disable=too-many-arguments
        self,
        *,
        on_success: Callable[[T], R],
        on_not_found: Callable[[str], R],
        on_validation: Callable[[tuple[FieldError, ...]], R],
        on_conflict: Callable[[str], R],
        on_failure: Callable[[str], R],
    ) -> R:
        """Invoke the callback matching this variant and return its result."""

    @abc.abstractmethod
    def unwrap(self) -> T:
        """Return the success value.

        Raises:
            ResultUnwrapError: If this is not a success.
        """

    @abc.abstractmethod
    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Apply `fn` to a success value; other variants are returned as is."""


# --- Success variants ---


@dataclass(frozen=True, slots=True)
class Success(_Outcome[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_success(self) -> bool:
        return True

    def match(  # pylint: disable=too-many-arguments
        self,
        *,
        on_success: Callable[[T], R],
        on_not_found: Callable[[str], R],
        on_validation: Callable[[tuple[FieldError, ...]], R],
        on_conflict: Callable[[str], R],
        on_failure: Callable[[str], R],
    ) -> R:
        return on_success(self.value)

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        return Success(fn(self.value))


@dataclass(frozen=True, slots=True)
class NoContent(Success[None]):
    """A success with no payload (e.g. after a deletion)."""

    value: None = None

    def map(self, fn: Callable[[None], U]) -> Result[U]:
        return Success(fn(None))


# --- Unsuccessful variants ---


class _Unsuccessful(_Outcome[T]):
    """Shared behaviour of the variants that carry no value."""

    __slots__ = ()

    def is_success(self) -> bool:
        return False

    def unwrap(self) -> T:
        raise ResultUnwrapError(self)

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        return self  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class NotFound(_Unsuccessful[T]):
    """A referenced entity does not exist."""

    message: str

    def match(  # pylint: disable=too-many-arguments
        self,
        *,
        on_success: Callable[[T], R],
        on_not_found: Callable[[str], R],
        on_validation: Callable[[tuple[FieldError, ...]], R],
        on_conflict: Callable[[str], R],
        on_failure: Callable[[str], R],
    ) -> R:
        return on_not_found(self.message)


@dataclass(frozen=True, slots=True)
class Invalid(_Unsuccessful[T]):
    """The input failed validation."""

    errors: tuple[FieldError, ...]

    def match(  # pylint: disable=too-many-arguments
        self,
        *,
        on_success: Callable[[T], R],
        on_not_found: Callable[[str], R],
        on_validation: Callable[[tuple[FieldError, ...]], R],
        on_conflict: Callable[[str], R],
        on_failure: Callable[[str], R],
    ) -> R:
        return on_validation(self.errors)


@dataclass(frozen=True, slots=True)
class Conflict(_Unsuccessful[T]):
    """The operation collides with the current state (duplicate, stale version)."""

    message: str

    def match(  # pylint: disable=too-many-arguments
        self,
        *,
        on_success: Callable[[T], R],
        on_not_found: Callable[[str], R],
        on_validation: Callable[[tuple[FieldError, ...]], R],
        on_conflict: Callable[[str], R],
        on_failure: Callable[[str], R],
    ) -> R:
        return on_conflict(self.message)


@dataclass(frozen=True, slots=True)
class Failure(_Unsuccessful[T]):
    """The operation could not be completed for a business reason."""

    message: str

    def match(  # pylint: disable=too-many-arguments
        self,
        *,
        on_success: Callable[[T], R],
        on_not_found: Callable[[str], R],
        on_validation: Callable[[tuple[FieldError, ...]], R],
        on_conflict: Callable[[str], R],
        on_failure: Callable[[str], R],
    ) -> R:
        return on_failure(self.message)


# Type alias for Result - a closed union of the variants above
Result = Success[T] | NotFound[T] | Invalid[T] | Conflict[T] | Failure[T]


# --- Factories ---


def success(value: T) -> Success[T]:
    """Build a successful result carrying `value`."""
    return Success(value)


def no_content() -> NoContent:
    """Build a successful result with no payload."""
    return NoContent()


def not_found(message: str) -> NotFound:
    """Build a not-found result."""
    return NotFound(message)


def validation_error(errors: Iterable[FieldError]) -> Invalid:
    """Build a validation-failure result from field errors.

    Raises:
        ValueError: If `errors` is empty; an invalid result must say why.
    """
    if not (errors := tuple(errors)):
        raise ValueError("validation_error() requires at least one FieldError")
    return Invalid(errors)


def conflict(message: str) -> Conflict:
    """Build a conflict result."""
    return Conflict(message)


def failure(message: str) -> Failure:
    """Build a failure result."""
    return Failure(message)
