"""Tests for MigrationService."""

from pathlib import Path

import pytest

from gosling.core.exceptions import MigrationFailedError, MigrationNotFoundError
from gosling.core.types import Direction, RunOutcome
from gosling.migrations import MigrationRegistry, collect_migrations
from gosling.services import MigrationService
from gosling.store import SQLiteDatabase, SqliteDialect


@pytest.fixture
def write_steps(write_migration):
    """Write three migrations, each creating one table."""
    for version, table in ((1, "a"), (2, "b"), (3, "c")):
        write_migration(
            f"{version}_create_{table}.sql",
            f"-- +goose Up\nCREATE TABLE {table} (id INTEGER);\n"
            f"-- +goose Down\nDROP TABLE {table};\n",
        )


@pytest.fixture
def service(
    db: SQLiteDatabase,
    dialect: SqliteDialect,
    migrations_dir: Path,
    registry: MigrationRegistry,
    write_steps,
) -> MigrationService:
    return MigrationService(db, dialect, collect_migrations(migrations_dir, registry), registry)


class TestUp:
    """Tests for applying migrations."""

    def test_fresh_database(self, service: MigrationService):
        assert service.version() == 0

    def test_up_applies_all_ascending(self, service: MigrationService, db, table_names):
        results = service.up()

        assert [r.version for r in results] == [1, 2, 3]
        assert all(r.direction is Direction.UP for r in results)
        assert all(r.outcome is RunOutcome.APPLIED for r in results)
        assert service.version() == 3
        assert {"a", "b", "c"} <= table_names(db)

    def test_up_nothing_pending(self, service: MigrationService):
        service.up()
        assert service.up() == []

    def test_up_to(self, service: MigrationService, db, table_names):
        results = service.up_to(2)

        assert [r.version for r in results] == [1, 2]
        assert service.version() == 2
        assert "c" not in table_names(db)

    def test_up_by_one(self, service: MigrationService):
        assert service.up_by_one().version == 1
        assert service.up_by_one().version == 2
        assert service.version() == 2

    def test_up_by_one_at_latest(self, service: MigrationService):
        service.up()
        assert service.up_by_one() is None

    def test_stops_at_first_failure(self, db, dialect, migrations_dir, write_migration, table_names):
        write_migration("1_a.sql", "-- +goose Up\nCREATE TABLE a (id INTEGER);\n")
        write_migration("2_b.sql", "-- +goose Up\nINSERT INTO missing VALUES (1);\n")
        write_migration("3_c.sql", "-- +goose Up\nCREATE TABLE c (id INTEGER);\n")
        service = MigrationService(db, dialect, collect_migrations(migrations_dir))

        with pytest.raises(MigrationFailedError) as exc_info:
            service.up()

        assert exc_info.value.version == 2
        assert service.version() == 1
        assert "c" not in table_names(db)

    def test_function_migration(self, db, dialect, migrations_dir, registry, write_steps):
        calls = []
        registry.add_migration(4, up=lambda tx: calls.append("up"), down=lambda tx: calls.append("down"))
        service = MigrationService(db, dialect, collect_migrations(migrations_dir, registry), registry)

        service.up()
        service.down()

        assert calls == ["up", "down"]
        assert service.version() == 3


class TestDown:
    """Tests for reverting migrations."""

    def test_down_reverts_current(self, service: MigrationService, db, table_names):
        service.up()

        result = service.down()

        assert result.version == 3
        assert result.direction is Direction.DOWN
        assert service.version() == 2
        assert "c" not in table_names(db)

    def test_down_at_zero(self, service: MigrationService):
        assert service.down() is None

    def test_down_to_descending(self, service: MigrationService):
        service.up()

        results = service.down_to(1)

        assert [r.version for r in results] == [3, 2]
        assert service.version() == 1

    def test_down_to_current(self, service: MigrationService):
        service.up()
        assert service.down_to(3) == []

    def test_reset(self, service: MigrationService, db, table_names):
        service.up()

        results = service.reset()

        assert [r.version for r in results] == [3, 2, 1]
        assert service.version() == 0
        assert not {"a", "b", "c"} & table_names(db)

    def test_applied_version_without_source(self, db, dialect, migrations_dir, write_migration):
        write_migration("1_a.sql", "-- +goose Up\nSELECT 1;\n")
        service = MigrationService(db, dialect, collect_migrations(migrations_dir))
        service.up()
        db.execute(dialect.insert_version_sql(), 9, True)

        with pytest.raises(MigrationNotFoundError, match="9"):
            service.down()


class TestRedo:
    """Tests for redo()."""

    def test_redo(self, service: MigrationService):
        service.up()

        down, up = service.redo()

        assert (down.version, down.direction) == (3, Direction.DOWN)
        assert (up.version, up.direction) == (3, Direction.UP)
        assert service.version() == 3

    def test_redo_at_zero(self, service: MigrationService):
        assert service.redo() is None


class TestStatus:
    """Tests for status()."""

    def test_status(self, service: MigrationService):
        service.up_to(2)

        statuses = service.status()

        assert [s.version for s in statuses] == [1, 2, 3]
        assert [s.applied for s in statuses] == [True, True, False]
        assert statuses[0].applied_at is not None
        assert statuses[2].applied_at is None
        assert statuses[0].source.endswith("1_create_a.sql")
