"""CLI entry point for gosling."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from loguru import logger

from ..core.config import Config
from ..core.exceptions import (
    ExecutionError,
    IndeterminateError,
    VersionRecordFailedError,
)
from ..services import ServiceContainer
from . import commands

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INDETERMINATE = 2

_HANDLERS = {
    "up": commands.handle_up,
    "up-by-one": commands.handle_up_by_one,
    "up-to": commands.handle_up_to,
    "down": commands.handle_down,
    "down-to": commands.handle_down_to,
    "redo": commands.handle_redo,
    "reset": commands.handle_reset,
    "status": commands.handle_status,
    "version": commands.handle_version,
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="gosling",
        description="Versioned SQL and Python database migrations",
    )
    parser.add_argument("--dir", type=Path, help="Directory with migration files")
    parser.add_argument("--db", type=Path, help="SQLite database file")
    parser.add_argument("--url", help="SQLAlchemy database URL (overrides --db)")
    parser.add_argument("--dialect", help="sqlite3, postgres or mysql")
    parser.add_argument("--table", help="Version table name")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=False)

    subparsers.add_parser("up", help="Apply all pending migrations")
    subparsers.add_parser("up-by-one", help="Apply the next pending migration")
    up_to = subparsers.add_parser("up-to", help="Apply migrations up to VERSION")
    up_to.add_argument("version", type=int, help="Target version")

    subparsers.add_parser("down", help="Revert the current migration")
    down_to = subparsers.add_parser("down-to", help="Revert migrations down to VERSION")
    down_to.add_argument("version", type=int, help="Target version")

    subparsers.add_parser("redo", help="Revert and re-apply the current migration")
    subparsers.add_parser("reset", help="Revert all migrations")
    subparsers.add_parser("status", help="Show migration status")
    subparsers.add_parser("version", help="Show the current database version")

    return parser


def build_config(args: argparse.Namespace) -> Config:
    """Environment configuration with command-line overrides applied."""
    config = Config.from_env()
    if args.dir:
        config.migrations_dir = args.dir
    if args.db:
        config.db_path = args.db
    if args.url:
        config.database_url = args.url
    if args.dialect:
        config.dialect = args.dialect
    if args.table:
        config.table_name = args.table
    return config


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, run the command and return the exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    try:
        config = build_config(args)
        with ServiceContainer(config) as services:
            _HANDLERS[args.command](args, services)
        return EXIT_OK
    except IndeterminateError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(
            f"Migration {e.version} is in an unknown state; verify the database "
            "manually before running migrations again.",
            file=sys.stderr,
        )
        return EXIT_INDETERMINATE
    except ExecutionError as e:
        print(f"Error: {e}", file=sys.stderr)
        if isinstance(e, VersionRecordFailedError):
            print(
                f"Migration {e.version} was applied but is not recorded in the version "
                "table; check the database and record it before running migrations again.",
                file=sys.stderr,
            )
        elif getattr(e, "state_may_have_changed", False):
            print(
                f"Migration {e.version} ran without a transaction and may have partly "
                "changed the database; check its state before running migrations again.",
                file=sys.stderr,
            )
        return EXIT_ERROR
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


def main() -> NoReturn:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
