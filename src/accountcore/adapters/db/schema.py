"""Tables for ACCOUNTCORE, on a shared `MetaData` with a naming convention.

Every identifier column is declared with `UlidIdType(<Kind>)`, which is where
each identifier kind is registered with the storage engine. The stored form is
the canonical ULID text, so ``ORDER BY id`` is creation order.

Constraints (enforced here):

| Constraint                         | Purpose                               |
|------------------------------------|---------------------------------------|
| PK(id) on both tables              | point lookup by identifier            |
| UNIQUE(tenant_id, email)           | one account per email within a tenant |
| FK users.tenant_id -> tenants.id   | users belong to an existing tenant    |
| CHECK(length(id) = 26)             | ULID length                           |
| CHECK(version >= 1)                | row token starts at 1 once stored     |

The `version` column is the optimistic-concurrency token checked by every
UPDATE and DELETE the SQLAlchemy unit of work issues.

Schema migration tooling is out of scope; create the tables with
``metadata.create_all(engine)``.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Enum,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

from accountcore.domain.tenants import MAX_TENANT_NAME_LENGTH, TenantId, TenantState
from accountcore.domain.users import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TITLE_LENGTH,
    UserId,
    UserRole,
)

from .sa_types import UlidIdType, UTCDateTime

__all__ = ["metadata", "tenants", "users"]

#: Deterministic constraint names (ix_/uq_/ck_/fk_/pk_ prefixes) so the
#: generated DDL is stable across runs and backends.
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_N_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_N_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

tenants = Table(
    "tenants",
    metadata,
    Column(
        "id",
        UlidIdType(TenantId),
        primary_key=True,
        comment="Tenant ULID (26 chars).",
    ),
    Column("name", String(MAX_TENANT_NAME_LENGTH), nullable=False),
    Column(
        "state",
        Enum(TenantState, native_enum=False, length=20),
        nullable=False,
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("modified_at", UTCDateTime(), nullable=True),
    Column(
        "version",
        Integer,
        nullable=False,
        comment="Optimistic concurrency token; incremented on every write.",
    ),
    CheckConstraint("length(id) = 26", name="id_26_char"),
    CheckConstraint("version >= 1", name="positive_version"),
    comment="One row per tenant.",
)

users = Table(
    "users",
    metadata,
    Column(
        "id",
        UlidIdType(UserId),
        primary_key=True,
        comment="User ULID (26 chars).",
    ),
    Column(
        "tenant_id",
        UlidIdType(TenantId),
        ForeignKey("tenants.id"),
        nullable=False,
    ),
    Column(
        "email",
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        comment="Lower-cased email address.",
    ),
    Column(
        "role",
        Enum(UserRole, native_enum=False, length=20),
        nullable=False,
    ),
    Column("first_name", String(MAX_NAME_LENGTH), nullable=True),
    Column("last_name", String(MAX_NAME_LENGTH), nullable=True),
    Column("title", String(MAX_TITLE_LENGTH), nullable=True),
    Column("email_confirmed", Boolean, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("modified_at", UTCDateTime(), nullable=True),
    Column(
        "version",
        Integer,
        nullable=False,
        comment="Optimistic concurrency token; incremented on every write.",
    ),
    UniqueConstraint("tenant_id", "email"),
    CheckConstraint("length(id) = 26", name="id_26_char"),
    CheckConstraint("version >= 1", name="positive_version"),
    Index(None, "tenant_id", "id"),
    comment="One row per user; users belong to exactly one tenant.",
)
