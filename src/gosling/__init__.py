"""gosling: versioned SQL and Python database migrations.

Example:
    from gosling import Config, ServiceContainer

    with ServiceContainer(Config(migrations_dir=Path("migrations"))) as services:
        services.migrate.up()
"""

from .core import (
    Config,
    Direction,
    GoslingError,
    MigrationKind,
    RunOutcome,
    RunResult,
)
from .migrations import (
    Migration,
    MigrationEngine,
    MigrationRegistry,
    MigrationSet,
    collect_migrations,
    numeric_component,
    parse_script,
)
from .services import MigrationService, ServiceContainer

__version__ = "0.1.0"

__all__ = [
    "Config",
    "Direction",
    "GoslingError",
    "MigrationKind",
    "RunOutcome",
    "RunResult",
    "Migration",
    "MigrationEngine",
    "MigrationRegistry",
    "MigrationSet",
    "collect_migrations",
    "numeric_component",
    "parse_script",
    "MigrationService",
    "ServiceContainer",
]
