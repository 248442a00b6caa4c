"""Inbound dispatcher: commands in, status codes out.

The dispatcher is the seam between a transport (an HTTP route, a job runner) and
the message bus. It owns two translations the service layer knows nothing about:

| Outcome                    | Status |
|----------------------------|--------|
| `Success`                  | 200    |
| `NoContent`                | 204    |
| `NotFound`                 | 404    |
| `Invalid`, malformed id    | 400    |
| `Conflict`                 | 409    |
| `Failure`, `StorageError`  | 500    |

Infrastructure faults are logged with their traceback and answered with a
generic 500 body; the detail never leaves the process.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, TypeVar

from accountcore.domain.errors import IdentifierParseError
from accountcore.domain.identifiers import StronglyTypedUlid
from accountcore.interfaces.errors import StorageError
from accountcore.service_layer.result import (
    Conflict,
    Failure,
    FieldError,
    Invalid,
    NoContent,
    NotFound,
    Result,
    Success,
    success,
    validation_error,
)

if TYPE_CHECKING:
    from accountcore.interfaces.cancellation import CancellationToken
    from accountcore.service_layer.commands import Command
    from accountcore.service_layer.messagebus import MessageBus

logger = logging.getLogger(__name__)

I = TypeVar("I", bound=StronglyTypedUlid)

# pylint: disable=too-few-public-methods


@dataclass(frozen=True)
class Response:
    """Transport-neutral response: a status code and a JSON-ready body."""

    status: HTTPStatus
    body: Any = None


def _problem(status: HTTPStatus, detail: str | None = None, **extra: Any) -> Response:
    body: dict[str, Any] = {"title": status.phrase, "status": status.value}
    if detail is not None:
        body["detail"] = detail
    body.update(extra)
    return Response(status, body)


def _render(value: Any) -> Any:
    if isinstance(value, StronglyTypedUlid):
        return {"id": str(value)}
    return value


def to_response(result: Result) -> Response:
    """Translate a handler result into a response."""
    match result:
        case NoContent():
            return Response(HTTPStatus.NO_CONTENT)
        case Success(value=value):
            return Response(HTTPStatus.OK, _render(value))
        case NotFound(message=message):
            return _problem(HTTPStatus.NOT_FOUND, message)
        case Invalid(errors=errors):
            return _problem(
                HTTPStatus.BAD_REQUEST,
                errors=[{"field": e.field, "message": e.message} for e in errors],
            )
        case Conflict(message=message):
            return _problem(HTTPStatus.CONFLICT, message)
        case Failure(message=message):
            return _problem(HTTPStatus.INTERNAL_SERVER_ERROR, message)
    raise TypeError(f"Not a result: {result!r}")


class Dispatcher:
    """Run commands through the message bus and answer with a `Response`.

    Args:
        bus: The message bus commands are handed to.
    """

    def __init__(self, bus: MessageBus) -> None:
        self.bus = bus

    def dispatch(
        self, cmd: Command, cancel_token: CancellationToken | None = None
    ) -> Response:
        """Handle `cmd` and translate the outcome into a response.

        `OperationCancelledError` and programming errors propagate; storage
        faults become a generic 500.
        """
        try:
            result = self.bus.handle(cmd, cancel_token)
        except StorageError:
            logger.exception("Storage failure handling %s", type(cmd).__name__)
            return _problem(HTTPStatus.INTERNAL_SERVER_ERROR)
        return to_response(result)

    def dispatch_for_id(
        self,
        kind: type[I],
        text: str,
        build: Callable[[I], Command],
        cancel_token: CancellationToken | None = None,
    ) -> Response:
        """Parse `text` as a `kind` id, then dispatch the command `build` makes from it.

        A malformed id is answered with 400 without reaching any handler.
        """
        parsed = self.parse_id(kind, text)
        if not parsed.is_success():
            return to_response(parsed)
        return self.dispatch(build(parsed.unwrap()), cancel_token)

    @staticmethod
    def parse_id(kind: type[I], text: str, field: str = "id") -> Result[I]:
        """Parse identifier text received from outside.

        Returns:
            A success with the identifier, or a validation result naming `field`.
        """
        try:
            return success(kind.parse(text))
        except IdentifierParseError as e:
            logger.debug("Rejected %s %r: %s", kind.__name__, text, e.reason)
            return validation_error([FieldError(field, str(e))])
