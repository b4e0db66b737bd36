"""Version identity for migration files.

Migration files are named ``<version>_<description>.<ext>`` where
``<version>`` is a positive base-10 integer and ``<ext>`` is ``sql`` for
SQL scripts or ``py`` for function migrations.
"""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import (
    InvalidVersionError,
    MissingSeparatorError,
    UnrecognizedKindError,
)
from ..core.types import MigrationKind

SEPARATOR = "_"

_KINDS = {
    ".sql": MigrationKind.SCRIPT,
    ".py": MigrationKind.FUNCTION,
}


def migration_kind(name: str | Path) -> MigrationKind:
    """Get the migration kind for a filename.

    Raises:
        UnrecognizedKindError: If the extension is not .sql or .py.
    """
    base = Path(name).name
    kind = _KINDS.get(Path(base).suffix)
    if kind is None:
        raise UnrecognizedKindError(base)
    return kind


def numeric_component(name: str | Path) -> int:
    """Extract the version number from a migration filename.

    Args:
        name: Path or filename, e.g. ``migrations/007_add_users.sql``.

    Returns:
        The version number, e.g. 7.

    Raises:
        UnrecognizedKindError: If the extension is not .sql or .py.
        MissingSeparatorError: If no version is separated from the name by '_'.
        InvalidVersionError: If the prefix is not an integer greater than zero.
    """
    base = Path(name).name
    migration_kind(base)

    idx = base.find(SEPARATOR)
    prefix = base[:idx] if idx >= 0 else ""
    # "add_users.sql" has no version prefix in front of its first '_'
    if not any(c.isdigit() for c in prefix):
        raise MissingSeparatorError(base)

    # int() also accepts signs, whitespace and underscores
    if not prefix.isascii() or not prefix.isdigit():
        raise InvalidVersionError(base, f"invalid version {prefix!r}")

    version = int(prefix, 10)
    if version <= 0:
        raise InvalidVersionError(base)
    return version
