"""Database connection and schema management."""

from content_vcs.db.backend import Cursor, Database, Row
from content_vcs.db.sqlite_backend import SQLiteBackend

try:
    from content_vcs.db.postgres_backend import PostgresBackend
except ImportError:
    PostgresBackend = None  # type: ignore[assignment,misc]

__all__ = ["Cursor", "Database", "PostgresBackend", "Row", "SQLiteBackend"]
