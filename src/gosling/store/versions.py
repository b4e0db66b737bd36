"""Version table access.

The version table holds one row per applied migration. Up runs insert a
row, Down runs delete it, both inside the migration's own transaction when
it has one. A baseline row for version 0 is inserted when the table is
created.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger

from ..app.protocols import Database, Dialect
from ..core.exceptions import DatabaseError
from ..core.types import MigrationRecord


class VersionStore:
    """Reads and initializes the version table for one database.

    Example:
        store = VersionStore(db, SqliteDialect())
        store.ensure()
        print(store.current_version())
    """

    def __init__(self, db: Database, dialect: Dialect):
        self.db = db
        self.dialect = dialect

    def exists(self) -> bool:
        """Check whether the version table exists."""
        rows = self.db.query(self.dialect.table_exists_sql(), self.dialect.table_name)
        return bool(rows)

    def ensure(self) -> None:
        """Create the version table with its baseline row if it is missing."""
        if self.exists():
            return

        logger.info(f"Creating version table {self.dialect.table_name}")
        tx = self.db.begin_transaction()
        try:
            tx.execute(self.dialect.create_version_table_sql())
            tx.execute(self.dialect.insert_version_sql(), 0, True)
        except Exception as e:
            tx.rollback()
            raise DatabaseError(f"Failed to create version table: {e}") from e
        tx.commit()

    def records(self) -> list[MigrationRecord]:
        """All rows of the version table, newest first."""
        return [
            MigrationRecord(
                version_id=int(version_id),
                applied_at=_to_datetime(tstamp),
                is_applied=bool(is_applied),
            )
            for version_id, is_applied, tstamp in self.db.query(self.dialect.db_version_sql())
        ]

    def applied(self) -> dict[int, datetime | None]:
        """Currently applied versions mapped to when they were applied.

        The newest row for a version decides its state.
        """
        seen: set[int] = set()
        applied: dict[int, datetime | None] = {}
        for record in self.records():
            if record.version_id in seen:
                continue
            seen.add(record.version_id)
            if record.is_applied and record.version_id > 0:
                applied[record.version_id] = record.applied_at
        return applied

    def current_version(self) -> int:
        """Highest applied version, or 0 when nothing is applied."""
        return max(self.applied(), default=0)


def _to_datetime(value: object) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.debug(f"Unparseable version timestamp: {value!r}")
        return None
