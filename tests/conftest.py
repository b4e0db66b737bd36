"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from gosling.migrations import MigrationRegistry
from gosling.store import SQLiteDatabase, SqliteDialect


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def fixtures_dir() -> Path:
    """Provide path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def db(test_db_path: Path) -> SQLiteDatabase:
    """Provide a connected SQLite database."""
    database = SQLiteDatabase(test_db_path)
    database.connect()
    yield database
    database.close()


@pytest.fixture
def dialect() -> SqliteDialect:
    """Provide the SQLite dialect with the default table name."""
    return SqliteDialect()


@pytest.fixture
def registry() -> MigrationRegistry:
    """Provide an empty function migration registry."""
    return MigrationRegistry()


@pytest.fixture
def migrations_dir(tmp_path: Path) -> Path:
    """Provide an empty migrations directory."""
    path = tmp_path / "migrations"
    path.mkdir()
    return path


@pytest.fixture
def write_migration(migrations_dir: Path) -> Callable[[str, str], Path]:
    """Provide a helper writing a migration file into migrations_dir."""

    def write(name: str, text: str) -> Path:
        path = migrations_dir / name
        path.write_text(text)
        return path

    return write


@pytest.fixture
def table_names() -> Callable[[SQLiteDatabase], set[str]]:
    """Provide a helper listing the tables of a SQLite database."""

    def names(database: SQLiteDatabase) -> set[str]:
        rows = database.query("SELECT name FROM sqlite_master WHERE type = 'table'")
        return {row[0] for row in rows}

    return names
