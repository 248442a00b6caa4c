"""Service layer for ACCOUNTCORE.

Implements application use-cases: commands, command handlers returning `Result`
values, and the message bus that owns the per-invocation transaction boundary.

Dependency rule: may import `accountcore.domain` and `accountcore.interfaces`,
but not `accountcore.adapters` or `accountcore.entrypoints`.
"""
