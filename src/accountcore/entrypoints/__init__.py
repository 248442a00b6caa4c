"""Entrypoints (inbound adapters) for ACCOUNTCORE.

Expose the service layer to a transport: parse identifiers from external text,
dispatch commands, and translate results and infrastructure faults into status
codes. Routing, authentication and rendering live outside this package.

Dependency rule: may import `accountcore.service_layer`; avoid importing
`accountcore.adapters` directly.
"""
