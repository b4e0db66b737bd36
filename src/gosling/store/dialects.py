"""Dialect-specific statements for the version table.

The engine treats these statements as opaque: it only executes them with
positional parameters in the placeholder style of the driver in use.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.config import DEFAULT_TABLE_NAME
from ..core.exceptions import ConfigError


@dataclass
class BaseDialect:
    """Shared statement templates; subclasses set name, placeholder and DDL."""

    table_name: str = DEFAULT_TABLE_NAME

    name = "base"
    placeholder = "?"

    def create_version_table_sql(self) -> str:
        raise NotImplementedError

    def insert_version_sql(self) -> str:
        p = self.placeholder
        return f"INSERT INTO {self.table_name} (version_id, is_applied) VALUES ({p}, {p})"

    def delete_version_sql(self) -> str:
        return f"DELETE FROM {self.table_name} WHERE version_id = {self.placeholder}"

    def db_version_sql(self) -> str:
        return (
            f"SELECT version_id, is_applied, tstamp FROM {self.table_name} "
            f"ORDER BY id DESC"
        )

    def table_exists_sql(self) -> str:
        """Query returning one row when the version table exists."""
        p = self.placeholder
        return (
            "SELECT 1 FROM information_schema.tables "
            f"WHERE table_name = {p}"
        )


class SqliteDialect(BaseDialect):
    """SQLite (sqlite3 module, qmark parameters)."""

    name = "sqlite3"
    placeholder = "?"

    def create_version_table_sql(self) -> str:
        return f"""CREATE TABLE {self.table_name} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            version_id INTEGER NOT NULL,
            is_applied INTEGER NOT NULL,
            tstamp TIMESTAMP DEFAULT (datetime('now'))
        )"""

    def table_exists_sql(self) -> str:
        return "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?"


class PostgresDialect(BaseDialect):
    """PostgreSQL (psycopg style, format parameters)."""

    name = "postgres"
    placeholder = "%s"

    def create_version_table_sql(self) -> str:
        return f"""CREATE TABLE {self.table_name} (
            id serial NOT NULL,
            version_id bigint NOT NULL,
            is_applied boolean NOT NULL,
            tstamp timestamp NULL default now(),
            PRIMARY KEY(id)
        )"""


class MySQLDialect(BaseDialect):
    """MySQL (PyMySQL/mysqlclient style, format parameters)."""

    name = "mysql"
    placeholder = "%s"

    def create_version_table_sql(self) -> str:
        return f"""CREATE TABLE {self.table_name} (
            id serial NOT NULL,
            version_id bigint NOT NULL,
            is_applied boolean NOT NULL,
            tstamp timestamp NULL default now(),
            PRIMARY KEY(id)
        )"""


_DIALECTS: dict[str, type[BaseDialect]] = {
    "sqlite3": SqliteDialect,
    "sqlite": SqliteDialect,
    "postgres": PostgresDialect,
    "postgresql": PostgresDialect,
    "mysql": MySQLDialect,
}


def get_dialect(name: str, table_name: str = DEFAULT_TABLE_NAME) -> BaseDialect:
    """Create a dialect by name.

    Args:
        name: One of sqlite3, sqlite, postgres, postgresql, mysql.
        table_name: Name of the version table.

    Raises:
        ConfigError: If the dialect is unknown or the table name is unsafe.
    """
    cls = _DIALECTS.get(name.lower())
    if cls is None:
        known = ", ".join(sorted(_DIALECTS))
        raise ConfigError(f"unknown dialect {name!r} (expected one of: {known})")
    # exists() matches the bare name, so schema-qualified names are not supported
    if not table_name.replace("_", "").isalnum():
        raise ConfigError(f"invalid version table name {table_name!r}")
    return cls(table_name=table_name)
