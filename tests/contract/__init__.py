"""Contract tests.

Fixtures parametrize the implementation; the tests assert only what callers
of the interface can observe.
"""
