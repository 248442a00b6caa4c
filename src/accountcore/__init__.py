"""ACCOUNTCORE

The command execution core of a multi-tenant account-management service.
Entities are named by strongly-typed, time-sortable ULIDs, state changes run as
commands that report their outcome through a closed Result type, and typed
identifiers are persisted through SQLAlchemy without leaking their representation.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
