"""Unit tests.

No database files and no threads beyond what a test starts itself. Handler
tests go through the message bus over `InMemoryAccountData`.
"""
