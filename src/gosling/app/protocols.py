"""Protocol definitions for the capabilities gosling consumes.

The migration engine never talks to a driver directly. It depends on:
- Database: executes statements and opens transactions
- Transaction: the same execute/query surface plus commit and rollback
- Dialect: yields the version-table statements for one database engine

Function migrations receive either a Database or a Transaction as their
single argument, so both expose ``execute`` and ``query``.

Example:
    def up(db: Executor) -> None:
        db.execute("UPDATE users SET username = 'admin' WHERE username = 'root'")
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Executor(Protocol):
    """Anything statements can be executed against."""

    def execute(self, statement: str, *args: Any) -> Any:
        """Execute one statement with positional parameters."""
        ...

    def query(self, statement: str, *args: Any) -> list[tuple]:
        """Execute one statement and return all rows."""
        ...


@runtime_checkable
class Transaction(Executor, Protocol):
    """An open transaction owned by a single migration run."""

    def commit(self) -> None:
        """Commit the transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the transaction."""
        ...


@runtime_checkable
class Database(Executor, Protocol):
    """Live connection; statements executed directly are not wrapped."""

    def begin_transaction(self) -> Transaction:
        """Open a new transaction."""
        ...


@runtime_checkable
class Dialect(Protocol):
    """Engine-specific statements for the version table."""

    name: str
    table_name: str

    def create_version_table_sql(self) -> str:
        """Statement creating the version table."""
        ...

    def insert_version_sql(self) -> str:
        """Statement recording a version; parameters (version_id, is_applied)."""
        ...

    def delete_version_sql(self) -> str:
        """Statement removing a version; parameter (version_id,)."""
        ...

    def db_version_sql(self) -> str:
        """Query returning (version_id, is_applied, tstamp) rows, newest first."""
        ...

    def table_exists_sql(self) -> str:
        """Query returning a row when the table named by its parameter exists."""
        ...


MigrationFunc = Callable[[Executor], Any]
