"""Migration service: decides which versions to run and in what order."""

from __future__ import annotations

from loguru import logger

from ..app.protocols import Database, Dialect
from ..core.exceptions import MigrationNotFoundError
from ..core.types import Direction, MigrationStatus, RunResult
from ..migrations.engine import MigrationEngine
from ..migrations.model import Migration, MigrationSet
from ..migrations.registry import MigrationRegistry
from ..store.versions import VersionStore


class MigrationService:
    """Applies and reverts a set of migrations against one database.

    Up batches run in ascending version order, Down batches in descending
    order, one engine run per version. A batch stops at the first error,
    which propagates unchanged; results of the versions already run are
    logged.

    Example:
        service = MigrationService(db, dialect, collect_migrations("migrations"))
        service.up()
        print(service.version())
    """

    def __init__(
        self,
        db: Database,
        dialect: Dialect,
        migrations: MigrationSet,
        registry: MigrationRegistry | None = None,
    ):
        """Initialize MigrationService.

        Args:
            db: Database to migrate.
            dialect: Version-table statements for the database.
            migrations: Known migrations.
            registry: Registered function migrations.
        """
        self.migrations = migrations
        self.store = VersionStore(db, dialect)
        self.engine = MigrationEngine(db, dialect, registry)

    def version(self) -> int:
        """Current database version."""
        self.store.ensure()
        return self.store.current_version()

    def status(self) -> list[MigrationStatus]:
        """Applied state of every known migration, ascending."""
        self.store.ensure()
        applied = self.store.applied()
        return [
            MigrationStatus(
                version=m.version,
                source=m.source,
                applied=m.version in applied,
                applied_at=applied.get(m.version),
            )
            for m in self.migrations
        ]

    def up(self, target: int | None = None) -> list[RunResult]:
        """Apply every pending migration up to and including ``target``."""
        self.store.ensure()
        current = self.store.current_version()
        pending = self.migrations.pending(current, target)
        if not pending:
            logger.info(f"No migrations to run, current version: {current}")
            return []
        results = self._run_batch(pending, Direction.UP)
        logger.info(f"Applied {len(results)} migration(s), now at version {self.store.current_version()}")
        return results

    def up_to(self, version: int) -> list[RunResult]:
        """Apply pending migrations up to and including ``version``."""
        return self.up(target=version)

    def up_by_one(self) -> RunResult | None:
        """Apply the next pending migration, if any."""
        self.store.ensure()
        current = self.store.current_version()
        migration = self.migrations.next_after(current)
        if migration is None:
            logger.info(f"No migrations to run, current version: {current}")
            return None
        return self.engine.run(migration, Direction.UP)

    def down(self) -> RunResult | None:
        """Revert the current version."""
        self.store.ensure()
        current = self.store.current_version()
        if current == 0:
            logger.info("No migrations to revert, database is at version 0")
            return None
        return self.engine.run(self._get(current), Direction.DOWN)

    def down_to(self, version: int) -> list[RunResult]:
        """Revert applied migrations until the database is at ``version``."""
        self.store.ensure()
        results: list[RunResult] = []
        while (current := self.store.current_version()) > version:
            results.append(self.engine.run(self._get(current), Direction.DOWN))
        if not results:
            logger.info(f"No migrations to revert, current version: {self.store.current_version()}")
        return results

    def reset(self) -> list[RunResult]:
        """Revert every applied migration."""
        return self.down_to(0)

    def redo(self) -> tuple[RunResult, RunResult] | None:
        """Revert and re-apply the current version."""
        self.store.ensure()
        current = self.store.current_version()
        if current == 0:
            logger.info("No migration to redo, database is at version 0")
            return None
        migration = self._get(current)
        down = self.engine.run(migration, Direction.DOWN)
        up = self.engine.run(migration, Direction.UP)
        return down, up

    def _get(self, version: int) -> Migration:
        migration = self.migrations.get(version)
        if migration is None:
            raise MigrationNotFoundError(version)
        return migration

    def _run_batch(self, migrations: list[Migration], direction: Direction) -> list[RunResult]:
        results = []
        for migration in migrations:
            results.append(self.engine.run(migration, direction))
        return results
