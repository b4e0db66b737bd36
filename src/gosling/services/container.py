"""Service container wiring configuration to a database and migrations."""

from __future__ import annotations

from loguru import logger

from ..app.protocols import Database
from ..core.config import Config
from ..migrations.discovery import collect_migrations
from ..migrations.registry import MigrationRegistry
from ..store.database import SQLAlchemyDatabase, SQLiteDatabase
from ..store.dialects import BaseDialect, get_dialect
from .migrate import MigrationService


class ServiceContainer:
    """Owns the database connection for one command invocation.

    Usage as context manager:

        with ServiceContainer(Config.from_env()) as services:
            services.migrate.up()

    A registry may be passed in so that migrations registered in code are
    available alongside those discovered in ``config.migrations_dir``.
    """

    def __init__(self, config: Config, registry: MigrationRegistry | None = None):
        self.config = config
        self.registry = registry if registry is not None else MigrationRegistry()
        self.dialect: BaseDialect = get_dialect(config.dialect, config.table_name)
        self._db: SQLiteDatabase | SQLAlchemyDatabase | None = None
        self._migrate: MigrationService | None = None

    def connect(self) -> None:
        """Open the configured database."""
        if self.config.database_url:
            logger.debug(f"Connecting to {self.config.database_url}")
            self._db = SQLAlchemyDatabase(self.config.database_url)
        else:
            logger.debug(f"Opening SQLite database {self.config.db_path}")
            db = SQLiteDatabase(self.config.db_path)
            db.connect()
            self._db = db

    def close(self) -> None:
        """Release the database connection."""
        if self._db is not None:
            self._db.close()
            self._db = None
        self._migrate = None

    def __enter__(self) -> "ServiceContainer":
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def db(self) -> Database:
        if self._db is None:
            self.connect()
        return self._db

    @property
    def migrate(self) -> MigrationService:
        """Migration service over the configured migrations directory."""
        if self._migrate is None:
            migrations = collect_migrations(self.config.migrations_dir, self.registry)
            self._migrate = MigrationService(self.db, self.dialect, migrations, self.registry)
        return self._migrate
