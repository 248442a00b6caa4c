"""Database engine factory and dialect helpers.

Every Engine used by ACCOUNTCORE comes from `make_engine()` so that connections
are configured the same way in production, tests and scripts:

- **SQLite**: connection PRAGMAs enforce foreign keys, enable WAL and set a busy
  timeout so concurrent units of work wait for the write lock instead of failing.
- **PostgreSQL**: no per-connection tuning; `pool_pre_ping` drops dead
  connections before a unit of work starts.

`DialectName` normalizes backend names so adapters compare against an Enum
rather than raw strings.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Connection, Engine

SQLITE_BUSY_TIMEOUT_MS = 5000


class UnsupportedDialect(Exception):
    """Raised when a database backend other than SQLite or PostgreSQL is used."""


class DialectName(str, Enum):
    """Supported SQLAlchemy dialect names."""

    POSTGRES = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def from_string(cls, dialect_str: str) -> DialectName:
        """Map a dialect or driver-qualified name (``sqlite+pysqlite``) to a member.

        Raises:
            UnsupportedDialect: if the backend is not supported.
        """
        base = (dialect_str or "").strip().lower().split("+", 1)[0]
        if base in {"postgres", "postgresql", "pg"}:
            return cls.POSTGRES
        if base == "sqlite":
            return cls.SQLITE
        raise UnsupportedDialect(f"Unsupported dialect: {dialect_str!r}")

    @classmethod
    def of(cls, bind: Engine | Connection) -> DialectName:
        """Return the dialect of an Engine or Connection."""
        return cls.from_string(bind.dialect.name)


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string points at SQLite."""
    return DialectName.from_string(make_url(str(url)).get_backend_name()) is (
        DialectName.SQLITE
    )


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.

    Raises:
        UnsupportedDialect: if the URL names an unsupported backend.

    Returns:
        Engine: Configured SQLAlchemy Engine.
    """

    sqlite = is_sqlite(url)
    engine = create_engine(url, echo=echo, pool_pre_ping=not sqlite)

    if sqlite:

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore #pylint: disable=W0613
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")
            cur.close()

    return engine
