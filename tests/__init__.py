"""ACCOUNTCORE test suite.

Folder taxonomy
- unit/         : Domain types, results, handlers and the dispatcher, run against
                  in-memory storage or fakes.
- contract/     : Behavior both unit-of-work adapters (and both id generators)
                  must share; each test runs once per implementation.
- integration/  : The SQLAlchemy unit of work and the bootstrap wiring against a
                  real SQLite file.
- fixtures/     : Engine fixtures loaded as a pytest plugin (no tests here).

Every test is marked after its top-level folder (see conftest.py), so
``pytest -m unit`` runs the fast suite only.
"""
