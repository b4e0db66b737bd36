"""Persistence layer for gosling.

This package provides:
- Dialects: version-table statements per database engine
- SQLiteDatabase / SQLAlchemyDatabase: execution capabilities
- VersionStore: reads and initializes the version table

Example:
    from gosling.store import SQLiteDatabase, VersionStore, get_dialect

    with SQLiteDatabase("app.db") as db:
        store = VersionStore(db, get_dialect("sqlite3"))
        store.ensure()
"""

from .database import (
    SQLAlchemyDatabase,
    SQLAlchemyTransaction,
    SQLiteDatabase,
    SQLiteTransaction,
)
from .dialects import (
    BaseDialect,
    MySQLDialect,
    PostgresDialect,
    SqliteDialect,
    get_dialect,
)
from .versions import VersionStore

__all__ = [
    # Databases
    "SQLiteDatabase",
    "SQLiteTransaction",
    "SQLAlchemyDatabase",
    "SQLAlchemyTransaction",
    # Dialects
    "BaseDialect",
    "SqliteDialect",
    "PostgresDialect",
    "MySQLDialect",
    "get_dialect",
    # Version table
    "VersionStore",
]
