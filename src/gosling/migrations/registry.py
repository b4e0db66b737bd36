"""Registry of function migrations.

Function migrations are registered on an explicit MigrationRegistry that is
handed to the engine, keyed by version number:

    registry = MigrationRegistry()
    registry.add_migration("00002_rename_root.py", up_rename, down_rename)
    registry.add_migration(3, up=backfill, transactional=False)
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from ..app.protocols import MigrationFunc
from ..core.exceptions import DuplicateVersionError, InvalidVersionError
from .model import FunctionBody, Migration
from .version import numeric_component


class MigrationRegistry:
    """Maps versions to registered up/down callables."""

    def __init__(self) -> None:
        self._bodies: dict[int, FunctionBody] = {}
        self._sources: dict[int, str] = {}

    def add_migration(
        self,
        key: int | str | Path,
        up: Optional[MigrationFunc] = None,
        down: Optional[MigrationFunc] = None,
        transactional: bool = True,
    ) -> FunctionBody:
        """Register the callables for one migration.

        Args:
            key: Version number, or a migration filename to take it from.
            up: Callable applying the migration, or None for a no-op.
            down: Callable reverting the migration, or None for a no-op.
            transactional: Whether to run inside a transaction.

        Returns:
            The registered FunctionBody.

        Raises:
            DuplicateVersionError: If the version is already registered.
            MigrationIdentityError: If ``key`` does not resolve to a version
                greater than zero.
        """
        if isinstance(key, int):
            if key <= 0:
                raise InvalidVersionError(str(key))
            version, source = key, f"{key}_registered"
        else:
            version, source = numeric_component(key), str(key)

        if version in self._bodies:
            raise DuplicateVersionError(version, self._sources[version], source)

        body = FunctionBody(up=up, down=down, transactional=transactional)
        self._bodies[version] = body
        self._sources[version] = source
        logger.debug(f"Registered function migration {version} ({source})")
        return body

    def get(self, version: int) -> FunctionBody | None:
        """Get the registered body for a version."""
        return self._bodies.get(version)

    def source(self, version: int) -> str | None:
        return self._sources.get(version)

    def migrations(self) -> list[Migration]:
        """Build Migration objects for everything registered."""
        return [
            Migration.function(
                version,
                body.up,
                body.down,
                source=self._sources[version],
                transactional=body.transactional,
            )
            for version, body in sorted(self._bodies.items())
        ]

    def __contains__(self, version: int) -> bool:
        return version in self._bodies

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._bodies))

    def __len__(self) -> int:
        return len(self._bodies)
