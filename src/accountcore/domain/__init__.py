"""Domain layer for ACCOUNTCORE.

Contains business rules: strongly-typed identifiers, entities (tenants, users)
and their invariants. This package is deliberately technology-agnostic; its only
third-party dependency is the ULID codec.

Dependency rule: do not import from `accountcore.adapters`,
`accountcore.service_layer` or `accountcore.entrypoints`.
"""
