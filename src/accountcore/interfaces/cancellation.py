"""Cooperative cancellation for command invocations.

The request scope creates one `CancellationToken` per invocation and passes it to
the message bus. Handlers and repositories call `raise_if_cancelled()` before
each call into storage, so an aborted request unwinds before its staged writes
are committed.
"""

from __future__ import annotations

import threading


class OperationCancelledError(Exception):
    """Raised at a cancellation check point once the token has been cancelled."""

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(
            "Operation was cancelled" + (f": {reason}" if reason else "")
        )
        self.reason = reason


class CancellationToken:
    """Thread-safe, one-way cancellation signal.

    Once cancelled a token stays cancelled; it cannot be reset.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None

    @classmethod
    def none(cls) -> CancellationToken:
        """Return a fresh token that nobody else holds, so it is never cancelled."""
        return cls()

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Later calls keep the first reason."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise `OperationCancelledError` if cancellation has been requested."""
        if self._event.is_set():
            raise OperationCancelledError(self._reason)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
