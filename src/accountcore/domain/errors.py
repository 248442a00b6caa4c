"""Domain-layer error definitions."""

# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


# ============================================================================
#                           Identifier errors
# ============================================================================


class IdentifierParseError(DomainError, ValueError):
    """Raised when text is not a well-formed identifier for a given kind.

    Attributes:
        kind (str): The identifier kind the text was parsed as (e.g. "UserId").
        text (object): The rejected input.
        reason (str): Short description of what was wrong.
    """

    def __init__(self, kind: str, text: object, reason: str) -> None:
        super().__init__(f"Invalid {kind} {text!r}: {reason}.")
        self.kind = kind
        self.text = text
        self.reason = reason


class IdentifierConversionError(DomainError, TypeError):
    """Raised when an identifier cannot be converted to or from its stored form.

    Attributes:
        kind (str): The identifier kind expected by the storage column.
        value (object): The value that could not be converted.
    """

    def __init__(self, kind: str, value: object, message: str | None = None) -> None:
        if message is None:
            message = f"Cannot convert {value!r} to or from {kind}"
        super().__init__(message)
        self.kind = kind
        self.value = value
