"""Message bus implementation for handling commands."""

import logging
from collections.abc import Callable

from accountcore.interfaces.cancellation import (
    CancellationToken,
    OperationCancelledError,
)
from accountcore.interfaces.errors import ConcurrencyConflictError
from accountcore.interfaces.unit_of_work import AbstractUnitOfWork

from .commands import Command
from .result import Result, conflict

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class NoHandlerForCommand(LookupError):
    """Exception raised when no handler is found for a command."""

    def __init__(self, cmd: Command) -> None:
        super().__init__(f"No handler found for command {type(cmd).__name__}")


class MessageBus:
    """A simple message bus for handling commands.

    The main responsibility of the message bus is to route commands to their
    appropriate handlers. It also owns the transaction boundary: every call to
    `handle()` gets a fresh unit of work from `uow_factory`, and the staged
    writes are committed only when the handler returns a successful result.

    Args:
        uow_factory: Callable returning a new AbstractUnitOfWork. Called once per
            handled command, so concurrent invocations never share a unit of work.
        command_handlers: A mapping of command types to their handlers.
            Handlers are called as ``handler(cmd, uow=..., cancel_token=...)``;
            additional dependencies (e.g. an id generator) should already be
            bound, see `accountcore.bootstrap.inject_dependencies`.

    Note:
        This implementation focuses on command handling and is synchronous for simplicity.
        The message bus serves as the main entrypoint to the service layer.
    """

    def __init__(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        command_handlers: dict[type[Command], Callable[..., Result]],
    ) -> None:
        self.uow_factory = uow_factory
        self._command_handlers = command_handlers

    def handle(
        self, cmd: Command, cancel_token: CancellationToken | None = None
    ) -> Result:
        """Handle a command by dispatching it to the appropriate handler.

        Args:
            cmd: The command to handle.
            cancel_token: Cooperative cancellation signal for this invocation.
                Defaults to a token that is never cancelled.

        Returns:
            The handler's result, or a conflict result when the commit finds
            that another invocation changed the same entities first.

        Raises:
            NoHandlerForCommand: If no handler is found for the command type.
            OperationCancelledError: If the token is cancelled before the commit.
            Exception: If the handler or the commit raises any other exception.
        """
        handler = self._command_handlers.get(type(cmd))
        if handler is None:
            logger.error("No handler found for command %s", type(cmd).__name__)
            raise NoHandlerForCommand(cmd)

        if cancel_token is None:
            cancel_token = CancellationToken.none()
        handler_name = self._get_handler_name(handler)
        logger.debug("Handling command %s with handler %s", cmd, handler_name)
        try:
            with self.uow_factory() as uow:
                result = handler(cmd, uow=uow, cancel_token=cancel_token)
                if result.is_success():
                    cancel_token.raise_if_cancelled()
                    uow.commit()
                else:
                    logger.debug(
                        "Command %s finished with %s; nothing committed",
                        type(cmd).__name__,
                        type(result).__name__,
                    )
                return result
        except ConcurrencyConflictError as e:
            logger.info("Concurrency conflict handling command %s: %s", cmd, e)
            return conflict(str(e))
        except OperationCancelledError:
            logger.info("Command %s was cancelled; nothing committed", cmd)
            raise
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Exception handling command %s with handler %s", cmd, handler_name
            )
            raise

    @staticmethod
    def _get_handler_name(fn: Callable[..., Result]) -> str:
        if hasattr(fn, "__name__"):
            return fn.__name__
        if hasattr(fn, "func") and hasattr(fn.func, "__name__"):
            return fn.func.__name__
        return repr(fn)
