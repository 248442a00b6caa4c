"""Interfaces (application boundary) for ACCOUNTCORE.

Defines framework-free application contracts: ABCs and small DTOs shared by the
service layer and adapters (repositories, unit of work, ID generators,
cancellation, storage errors). Business rules stay out of this package.

Dependency rule: may import `accountcore.domain` for entity and identifier types
only. It may be imported by `accountcore.service_layer`, `accountcore.adapters`,
and `accountcore.bootstrap`.
"""
