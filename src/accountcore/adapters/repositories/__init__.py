"""Repository adapters: in-memory and SQLAlchemy-backed."""

from .memory import InMemoryAccountData, InMemoryTenantRepository, InMemoryUserRepository
from .sqlalchemy_adapters import SqlAlchemyTenantRepository, SqlAlchemyUserRepository

__all__ = [
    "InMemoryAccountData",
    "InMemoryTenantRepository",
    "InMemoryUserRepository",
    "SqlAlchemyTenantRepository",
    "SqlAlchemyUserRepository",
]
