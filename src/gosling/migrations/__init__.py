"""Migration model, parsing and execution.

Example:
    from gosling.migrations import MigrationEngine, MigrationRegistry, collect_migrations
    from gosling.core import Direction

    registry = MigrationRegistry()
    migrations = collect_migrations("migrations", registry)
    engine = MigrationEngine(db, dialect, registry)
    for migration in migrations:
        engine.run(migration, Direction.UP)
"""

from .discovery import collect_migrations, load_function_module
from .engine import MigrationEngine
from .model import NO_VERSION, FunctionBody, Migration, MigrationSet, ScriptBody
from .parser import ParsedScript, parse_script, render_script
from .registry import MigrationRegistry
from .version import migration_kind, numeric_component

__all__ = [
    "Migration",
    "MigrationSet",
    "ScriptBody",
    "FunctionBody",
    "NO_VERSION",
    "MigrationRegistry",
    "MigrationEngine",
    "ParsedScript",
    "parse_script",
    "render_script",
    "collect_migrations",
    "load_function_module",
    "migration_kind",
    "numeric_component",
]
