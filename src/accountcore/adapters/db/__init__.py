"""Database plumbing: engine factory, column types, tables and row mappers."""
