"""Configuration management for gosling."""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_TABLE_NAME = "gosling_db_version"


@dataclass
class Config:
    """Main application configuration.

    Attributes:
        migrations_dir: Directory holding migration files.
        db_path: SQLite database file, used when no database_url is set.
        database_url: SQLAlchemy URL; takes precedence over db_path.
        dialect: Dialect name for the version-table statements.
        table_name: Name of the version table.
    """

    migrations_dir: Path = Path("migrations")
    db_path: Path = Path("gosling.db")
    database_url: str | None = None
    dialect: str = "sqlite3"
    table_name: str = DEFAULT_TABLE_NAME

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        if path := os.environ.get("GOSLING_DIR"):
            config.migrations_dir = Path(path)

        if path := os.environ.get("GOSLING_DB"):
            config.db_path = Path(path)

        if url := os.environ.get("GOSLING_DATABASE_URL"):
            config.database_url = url

        if dialect := os.environ.get("GOSLING_DIALECT"):
            config.dialect = dialect

        if table := os.environ.get("GOSLING_TABLE"):
            config.table_name = table

        return config
