"""Discovery of migrations in a directory.

``.sql`` files become script migrations. ``.py`` files are imported and
their module-level ``up`` / ``down`` functions are registered, with an
optional ``TRANSACTIONAL = False`` to opt out of the transaction wrapper:

    # migrations/00002_rename_root.py
    def up(db):
        db.execute("UPDATE users SET username = 'admin' WHERE username = 'root'")

    def down(db):
        db.execute("UPDATE users SET username = 'root' WHERE username = 'admin'")

Other files are ignored.
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

from loguru import logger

from ..core.exceptions import MigrationLoadError, UnrecognizedKindError
from ..core.types import MigrationKind
from .model import Migration, MigrationSet
from .registry import MigrationRegistry
from .version import migration_kind, numeric_component


def collect_migrations(
    directory: Path | str,
    registry: MigrationRegistry | None = None,
) -> MigrationSet:
    """Collect every migration in ``directory`` plus code-registered ones.

    Args:
        directory: Directory to scan (not recursive).
        registry: Registry that ``.py`` migrations are loaded into, and
            whose code-only registrations are included in the result.

    Returns:
        MigrationSet sorted by version with next/previous linked.

    Raises:
        MigrationIdentityError: If a .sql/.py filename has no valid version.
        DuplicateVersionError: If two migrations share a version.
        MigrationLoadError: If a .py migration fails to import.
    """
    directory = Path(directory)
    registry = registry if registry is not None else MigrationRegistry()
    found: list[Migration] = []
    function_versions: set[int] = set()

    if not directory.is_dir():
        logger.warning(f"Migrations directory does not exist: {directory}")
    else:
        for path in sorted(directory.iterdir()):
            if not path.is_file() or path.name.startswith(("_", ".")):
                continue

            try:
                kind = migration_kind(path)
            except UnrecognizedKindError:
                logger.debug(f"Skipping non-migration file: {path.name}")
                continue

            version = numeric_component(path)
            if kind is MigrationKind.SCRIPT:
                found.append(Migration.script(version, path))
                continue

            if version not in registry:
                load_function_module(path, registry)
            body = registry.get(version)
            found.append(
                Migration(
                    version,
                    str(path),
                    MigrationKind.FUNCTION,
                    transactional=body.transactional if body else True,
                )
            )
            function_versions.add(version)

    for migration in registry.migrations():
        if migration.version not in function_versions:
            found.append(migration)

    migrations = MigrationSet(found)
    logger.debug(f"Collected {len(migrations)} migration(s) from {directory}")
    return migrations


def load_function_module(path: Path, registry: MigrationRegistry) -> bool:
    """Import a ``.py`` migration and register its callables.

    Returns:
        True if the module defined ``up`` or ``down`` and was registered.
        A module defining neither is left unregistered, so running it
        fails with NotRegisteredError.
    """
    version = numeric_component(path)
    spec = importlib.util.spec_from_file_location(f"gosling_migration_{version}", path)
    if not spec or not spec.loader:
        raise MigrationLoadError(f"cannot load migration module {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(spec.name, None)
        raise MigrationLoadError(f"failed to import migration {path}: {e}") from e

    up = getattr(module, "up", None)
    down = getattr(module, "down", None)
    if up is None and down is None:
        logger.warning(f"Migration module {path.name} defines neither up() nor down()")
        return False

    registry.add_migration(
        path,
        up=up,
        down=down,
        transactional=getattr(module, "TRANSACTIONAL", True),
    )
    return True
