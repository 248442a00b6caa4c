"""Interface for ID generators."""

import abc

# pylint: disable=too-few-public-methods


class IdGenerator(abc.ABC):
    """Contract for an ID generator.

    Implementations return the canonical text of a ULID: 26 upper-case Crockford
    base32 characters that any `StronglyTypedUlid` kind can parse.
    """

    @abc.abstractmethod
    def new_id(self) -> str:
        """Generate a new unique identifier."""
