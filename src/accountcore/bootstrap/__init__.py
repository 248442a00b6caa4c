"""Bootstrap (composition root) for ACCOUNTCORE.

Assembles the application at runtime: wires concrete adapters to service-layer
handlers, composes shared services (message bus, unit-of-work factory, id
generator), reads configuration and configures logging.

Import rules:
- Entry points receive what this package builds; they do not build adapters.
- This package may import: `accountcore.adapters`, `accountcore.service_layer`,
  `accountcore.interfaces`, `accountcore.domain`, `accountcore.config` and
  `accountcore.logging`.
- Inner layers must not import `accountcore.bootstrap`.

Public surface:
- Re-export composition factories from this module; keep wiring helpers internal.
- No business rules live here; this is assembly and lifecycle only.
"""

from .bootstrap import (
    AppContainer,
    bootstrap,
    build_in_memory_bus,
    build_message_bus,
    build_uow_factory,
    inject_dependencies,
)

__all__ = [
    "AppContainer",
    "bootstrap",
    "build_in_memory_bus",
    "build_message_bus",
    "build_uow_factory",
    "inject_dependencies",
]
