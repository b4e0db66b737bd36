"""Tests for the gosling command line."""

import sys
from pathlib import Path

import pytest
from loguru import logger

from gosling.cli.main import (
    EXIT_ERROR,
    EXIT_INDETERMINATE,
    EXIT_OK,
    build_config,
    create_parser,
    run,
)
from gosling.core.exceptions import CommitFailedError, VersionRecordFailedError
from gosling.services import MigrationService


@pytest.fixture(autouse=True)
def restore_logger():
    """run() replaces the loguru handlers; put back a plain stderr sink."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def cli(tmp_path: Path, migrations_dir: Path, monkeypatch):
    """Run the CLI against a temporary database and migrations directory."""
    for name in ("GOSLING_DATABASE_URL", "GOSLING_DIALECT", "GOSLING_TABLE"):
        monkeypatch.delenv(name, raising=False)
    base = ["--dir", str(migrations_dir), "--db", str(tmp_path / "cli.db")]

    def invoke(*args: str) -> int:
        return run(base + list(args))

    return invoke


@pytest.fixture
def two_migrations(write_migration):
    write_migration(
        "1_create_a.sql",
        "-- +goose Up\nCREATE TABLE a (id INTEGER);\n-- +goose Down\nDROP TABLE a;\n",
    )
    write_migration("2_empty.sql", "-- +goose Up\n-- +goose Down\n")


class TestParser:
    def test_global_options(self, tmp_path: Path):
        args = create_parser().parse_args(
            ["--dir", "m", "--db", "x.db", "--table", "versions", "up-to", "3"]
        )
        assert args.command == "up-to"
        assert args.version == 3

        config = build_config(args)
        assert config.migrations_dir == Path("m")
        assert config.db_path == Path("x.db")
        assert config.table_name == "versions"

    def test_version_must_be_integer(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["down-to", "abc"])

    def test_no_command_prints_help(self, capsys):
        assert run([]) == EXIT_OK
        assert "usage: gosling" in capsys.readouterr().out


class TestCommands:
    def test_up_and_status(self, cli, two_migrations, capsys):
        assert cli("up") == EXIT_OK
        out = capsys.readouterr().out
        assert "OK    up" in out
        assert "EMPTY up" in out

        assert cli("status") == EXIT_OK
        out = capsys.readouterr().out
        assert "Pending" not in out
        assert "1_create_a.sql" in out

    def test_version(self, cli, two_migrations, capsys):
        cli("up-by-one")
        capsys.readouterr()

        assert cli("version") == EXIT_OK
        assert capsys.readouterr().out.strip() == "gosling: version 1"

    def test_status_pending(self, cli, two_migrations, capsys):
        assert cli("status") == EXIT_OK
        assert capsys.readouterr().out.count("Pending") == 2

    def test_down_to_and_redo(self, cli, two_migrations, capsys):
        cli("up")
        assert cli("redo") == EXIT_OK
        assert cli("down-to", "0") == EXIT_OK
        capsys.readouterr()

        assert cli("version") == EXIT_OK
        assert "version 0" in capsys.readouterr().out

    def test_nothing_to_run(self, cli, capsys):
        assert cli("up") == EXIT_OK
        assert "No migrations to run." in capsys.readouterr().out

    def test_failure_exit_code(self, cli, write_migration, capsys):
        write_migration("1_bad.sql", "-- +goose Up\nINSERT INTO missing VALUES (1);\n")

        assert cli("up") == EXIT_ERROR
        assert "Error:" in capsys.readouterr().err

    def test_malformed_script_exit_code(self, cli, write_migration, capsys):
        write_migration("1_bad.sql", "CREATE TABLE a (id INTEGER);\n-- +goose Up\n")

        assert cli("up") == EXIT_ERROR
        assert "statement outside of an Up or Down section" in capsys.readouterr().err

    def test_indeterminate_exit_code(self, cli, two_migrations, monkeypatch, capsys):
        def fail(self, target=None):
            raise CommitFailedError("commit failed", 1, "1_create_a.sql")

        monkeypatch.setattr(MigrationService, "up", fail)

        assert cli("up") == EXIT_INDETERMINATE
        err = capsys.readouterr().err
        assert "verify the database manually" in err

    def test_non_transactional_failure_warns(self, cli, write_migration, capsys):
        write_migration(
            "1_partial.sql",
            "-- +goose NO TRANSACTION\n-- +goose Up\n"
            "CREATE TABLE a (id INTEGER);\nSELECT * FROM missing_table;\n",
        )

        assert cli("up") == EXIT_ERROR
        err = capsys.readouterr().err
        assert "step 2 of 2" in err
        assert "Migration 1 ran without a transaction and may have partly changed" in err

    def test_transactional_failure_has_no_warning(self, cli, write_migration, capsys):
        write_migration("1_bad.sql", "-- +goose Up\nSELECT * FROM missing_table;\n")

        assert cli("up") == EXIT_ERROR
        assert "may have partly changed" not in capsys.readouterr().err

    def test_version_record_failure_warns(self, cli, two_migrations, monkeypatch, capsys):
        def fail(self, target=None):
            raise VersionRecordFailedError("version table unavailable", 1, "1_create_a.sql")

        monkeypatch.setattr(MigrationService, "up", fail)

        assert cli("up") == EXIT_ERROR
        assert "Migration 1 was applied but is not recorded" in capsys.readouterr().err
