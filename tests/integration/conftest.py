"""Pytest configuration and fixtures for integration tests."""

import pytest
from pathlib import Path

from gosling.migrations import MigrationEngine, MigrationRegistry
from gosling.store import SQLiteDatabase, SqliteDialect, VersionStore


@pytest.fixture
def integration_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for integration tests."""
    return tmp_path / "integration_test.db"


@pytest.fixture
def db(integration_db_path: Path) -> SQLiteDatabase:
    """Provide a connected database instance for integration tests."""
    database = SQLiteDatabase(integration_db_path)
    database.connect()
    yield database
    database.close()


@pytest.fixture
def store(db: SQLiteDatabase, dialect: SqliteDialect) -> VersionStore:
    """Provide an initialized version table."""
    versions = VersionStore(db, dialect)
    versions.ensure()
    return versions


@pytest.fixture
def engine(db: SQLiteDatabase, dialect: SqliteDialect, registry: MigrationRegistry) -> MigrationEngine:
    """Provide an engine over the integration database."""
    return MigrationEngine(db, dialect, registry)


@pytest.fixture
def version_rows(db: SQLiteDatabase, dialect: SqliteDialect):
    """Provide a helper returning the version ids recorded in the table."""

    def rows() -> list[int]:
        return [
            row[0]
            for row in db.query(f"SELECT version_id FROM {dialect.table_name} ORDER BY id")
        ]

    return rows
