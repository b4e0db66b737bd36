"""Execution capabilities over real database connections.

SQLiteDatabase drives the stdlib ``sqlite3`` module in autocommit mode and
issues BEGIN/COMMIT/ROLLBACK itself, so DDL statements take part in
migration transactions. SQLAlchemyDatabase works with any SQLAlchemy engine
and passes statements straight to the DBAPI driver.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from ..core.exceptions import DatabaseError

if TYPE_CHECKING:
    from sqlalchemy.engine import RootTransaction

AUTOCOMMIT = "AUTOCOMMIT"


class SQLiteTransaction:
    """An explicit SQLite transaction on a shared connection."""

    def __init__(self, connection: sqlite3.Connection):
        self._connection = connection
        self._open = True

    def _check_open(self) -> sqlite3.Connection:
        if not self._open:
            raise DatabaseError("Transaction already finished")
        return self._connection

    def execute(self, statement: str, *args: Any) -> sqlite3.Cursor:
        connection = self._check_open()
        try:
            return connection.execute(statement, args)
        except sqlite3.Error as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def query(self, statement: str, *args: Any) -> list[tuple]:
        return [tuple(row) for row in self.execute(statement, *args).fetchall()]

    def commit(self) -> None:
        connection = self._check_open()
        try:
            connection.execute("COMMIT")
        except sqlite3.Error as e:
            raise DatabaseError(f"Commit failed: {e}") from e
        self._open = False

    def rollback(self) -> None:
        connection = self._check_open()
        self._open = False
        # SQLite rolls back by itself on some errors (e.g. SQLITE_FULL)
        if not connection.in_transaction:
            logger.debug("Transaction already rolled back by SQLite")
            return
        try:
            connection.execute("ROLLBACK")
        except sqlite3.Error as e:
            raise DatabaseError(f"Rollback failed: {e}") from e


class SQLiteDatabase:
    """SQLite connection manager implementing the Database protocol.

    Example:
        with SQLiteDatabase(Path("app.db")) as db:
            tx = db.begin_transaction()
            tx.execute("CREATE TABLE t (id INTEGER)")
            tx.commit()
    """

    def __init__(self, path: Path | str):
        """Initialize database with path.

        Args:
            path: Path to the SQLite database file, or ":memory:".
        """
        self.path = Path(path) if str(path) != ":memory:" else path
        self._connection: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the connection in autocommit mode."""
        try:
            if isinstance(self.path, Path):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(str(self.path), isolation_level=None)
            self._connection.execute("PRAGMA foreign_keys = ON")
        except (OSError, sqlite3.Error) as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            try:
                self._connection.close()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to close database: {e}") from e
            finally:
                self._connection = None

    def __enter__(self) -> "SQLiteDatabase":
        if self._connection is None:
            self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise DatabaseError("Database not connected")
        return self._connection

    def execute(self, statement: str, *args: Any) -> sqlite3.Cursor:
        """Execute a statement outside of any transaction.

        Raises:
            DatabaseError: If connection is not available or the statement fails.
        """
        try:
            return self.connection.execute(statement, args)
        except sqlite3.Error as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def query(self, statement: str, *args: Any) -> list[tuple]:
        return [tuple(row) for row in self.execute(statement, *args).fetchall()]

    def begin_transaction(self) -> SQLiteTransaction:
        """Start a transaction; only one may be open at a time."""
        connection = self.connection
        if connection.in_transaction:
            raise DatabaseError("A transaction is already in progress")
        try:
            connection.execute("BEGIN")
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to begin transaction: {e}") from e
        return SQLiteTransaction(connection)


class SQLAlchemyTransaction:
    """A transaction on a dedicated SQLAlchemy connection."""

    def __init__(self, connection: Connection, transaction: RootTransaction):
        self._connection = connection
        self._transaction = transaction

    def execute(self, statement: str, *args: Any) -> int:
        try:
            return _exec(self._connection, statement, args).rowcount
        except Exception as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def query(self, statement: str, *args: Any) -> list[tuple]:
        try:
            return [tuple(row) for row in _exec(self._connection, statement, args)]
        except Exception as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def commit(self) -> None:
        try:
            self._transaction.commit()
        except Exception as e:
            raise DatabaseError(f"Commit failed: {e}") from e
        finally:
            self._connection.close()

    def rollback(self) -> None:
        try:
            self._transaction.rollback()
        except Exception as e:
            raise DatabaseError(f"Rollback failed: {e}") from e
        finally:
            self._connection.close()


class SQLAlchemyDatabase:
    """Database protocol over a SQLAlchemy engine.

    Statements use the driver's own placeholder style, matching the
    dialect chosen for the version table. Statements executed outside a
    transaction run in autocommit mode. On SQLite the pysqlite driver is
    switched to explicit BEGIN so that DDL is rolled back with the rest of
    a transaction.

    Example:
        db = SQLAlchemyDatabase("postgresql+psycopg://localhost/app")
    """

    def __init__(self, url_or_engine: str | Engine):
        if isinstance(url_or_engine, Engine):
            self.engine = url_or_engine
        else:
            self.engine = create_engine(url_or_engine)
        if self.engine.dialect.name == "sqlite":
            _use_explicit_begin(self.engine)

    def execute(self, statement: str, *args: Any) -> int:
        """Execute one statement on its own autocommit connection."""
        try:
            with self.engine.connect() as connection:
                connection.execution_options(isolation_level=AUTOCOMMIT)
                return _exec(connection, statement, args).rowcount
        except Exception as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def query(self, statement: str, *args: Any) -> list[tuple]:
        try:
            with self.engine.connect() as connection:
                return [tuple(row) for row in _exec(connection, statement, args)]
        except Exception as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def begin_transaction(self) -> SQLAlchemyTransaction:
        try:
            connection = self.engine.connect()
        except Exception as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e
        try:
            return SQLAlchemyTransaction(connection, connection.begin())
        except Exception as e:
            connection.close()
            raise DatabaseError(f"Failed to begin transaction: {e}") from e

    def close(self) -> None:
        self.engine.dispose()


def _use_explicit_begin(engine: Engine) -> None:
    if event.contains(engine, "begin", _emit_begin):
        return
    event.listen(engine, "connect", _disable_pysqlite_transactions)
    event.listen(engine, "begin", _emit_begin)


def _disable_pysqlite_transactions(dbapi_connection: Any, connection_record: Any) -> None:
    # pysqlite otherwise begins lazily and never before DDL
    dbapi_connection.isolation_level = None


def _emit_begin(connection: Connection) -> None:
    if connection.get_execution_options().get("isolation_level") != AUTOCOMMIT:
        connection.exec_driver_sql("BEGIN")


def _exec(connection: Connection, statement: str, args: tuple):
    if args:
        return connection.exec_driver_sql(statement, args)
    return connection.exec_driver_sql(statement)
