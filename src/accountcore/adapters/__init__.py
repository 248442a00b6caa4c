"""Adapters (infrastructure) for ACCOUNTCORE.

Provide concrete implementations of the interfaces (in-memory and SQLAlchemy
repositories and units of work, ID generators), plus persistence mapping and
related wiring (engines, metadata, tables, column types).

Dependency rule: may import `accountcore.domain` and `accountcore.interfaces`;
neither may import this package.
"""
