"""Integration tests.

Run against a file-backed SQLite database created per test, so several
connections (and threads) can hold independent transactions.
"""
