"""Test fakes for testing without a real database.

Example:
    from tests.fakes import FakeDatabase

    db = FakeDatabase(fail_on="DROP")
    engine = MigrationEngine(db, SqliteDialect())
"""

from .database import FakeDatabase, FakeDatabaseError, FakeTransaction

__all__ = [
    "FakeDatabase",
    "FakeDatabaseError",
    "FakeTransaction",
]
