"""Migration model.

A Migration is one versioned unit of change. Its body is one of:
- ScriptBody: a ``.sql`` file parsed fresh on every run
- FunctionBody: a pair of Python callables taking an execution capability

Function migrations discovered on disk may carry no body yet; the engine
resolves them from its MigrationRegistry when they run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from ..app.protocols import MigrationFunc
from ..core.exceptions import DuplicateVersionError, InvalidVersionError
from ..core.types import MigrationKind

NO_VERSION = -1


@dataclass(frozen=True)
class ScriptBody:
    """SQL script on disk."""

    path: Path


@dataclass(frozen=True)
class FunctionBody:
    """Registered up/down callables. A missing callable is a no-op."""

    up: Optional[MigrationFunc] = None
    down: Optional[MigrationFunc] = None
    transactional: bool = True


Body = Union[ScriptBody, FunctionBody]


@dataclass
class Migration:
    """A versioned migration.

    Attributes:
        version: Positive version number, unique within a set.
        source: Path of the file, or a label for code-registered functions.
        kind: SCRIPT or FUNCTION.
        body: How to run it; None means "look up in the registry".
        transactional: False forces non-transactional execution.
        next: Following version in the collected set, or NO_VERSION.
        previous: Preceding version in the collected set, or NO_VERSION.
    """

    version: int
    source: str
    kind: MigrationKind
    body: Optional[Body] = None
    transactional: bool = True
    next: int = field(default=NO_VERSION, compare=False)
    previous: int = field(default=NO_VERSION, compare=False)

    def __post_init__(self) -> None:
        if self.version <= 0:
            raise InvalidVersionError(self.source)
        if self.kind is MigrationKind.SCRIPT:
            if isinstance(self.body, FunctionBody):
                raise ValueError(f"script migration {self.source} cannot have a function body")
            if self.body is None:
                self.body = ScriptBody(Path(self.source))
        if self.kind is MigrationKind.FUNCTION and isinstance(self.body, ScriptBody):
            raise ValueError(f"function migration {self.source} cannot have a script body")

    @classmethod
    def script(cls, version: int, path: Path | str) -> "Migration":
        """Create a SQL script migration."""
        return cls(version, str(path), MigrationKind.SCRIPT, ScriptBody(Path(path)))

    @classmethod
    def function(
        cls,
        version: int,
        up: Optional[MigrationFunc] = None,
        down: Optional[MigrationFunc] = None,
        source: str | None = None,
        transactional: bool = True,
    ) -> "Migration":
        """Create a function migration with its callables attached."""
        return cls(
            version,
            source or f"{version}_registered",
            MigrationKind.FUNCTION,
            FunctionBody(up, down, transactional),
        )

    @property
    def name(self) -> str:
        """Base name of the source, for log lines."""
        return Path(self.source).name

    def __str__(self) -> str:
        return self.source


class MigrationSet:
    """Migrations sorted by version with next/previous links.

    Example:
        migrations = MigrationSet([m3, m1, m2])
        assert [m.version for m in migrations] == [1, 2, 3]
        assert migrations.get(2).next == 3
    """

    def __init__(self, migrations: Iterable[Migration] = ()):
        self._migrations: list[Migration] = []
        by_version: dict[int, Migration] = {}
        for migration in migrations:
            if existing := by_version.get(migration.version):
                raise DuplicateVersionError(
                    migration.version, existing.source, migration.source
                )
            by_version[migration.version] = migration
        self._migrations = sorted(by_version.values(), key=lambda m: m.version)
        self._link()

    def _link(self) -> None:
        for i, migration in enumerate(self._migrations):
            migration.previous = self._migrations[i - 1].version if i > 0 else NO_VERSION
            migration.next = (
                self._migrations[i + 1].version
                if i + 1 < len(self._migrations)
                else NO_VERSION
            )

    def __iter__(self) -> Iterator[Migration]:
        return iter(self._migrations)

    def __len__(self) -> int:
        return len(self._migrations)

    def __getitem__(self, index: int) -> Migration:
        return self._migrations[index]

    def get(self, version: int) -> Migration | None:
        """Get a migration by version."""
        for migration in self._migrations:
            if migration.version == version:
                return migration
        return None

    def versions(self) -> list[int]:
        return [m.version for m in self._migrations]

    def first(self) -> Migration | None:
        return self._migrations[0] if self._migrations else None

    def last(self) -> Migration | None:
        return self._migrations[-1] if self._migrations else None

    def next_after(self, version: int) -> Migration | None:
        """Get the first migration with a version greater than ``version``."""
        for migration in self._migrations:
            if migration.version > version:
                return migration
        return None

    def pending(self, current: int, target: int | None = None) -> list[Migration]:
        """Migrations above ``current`` up to and including ``target``, ascending."""
        return [
            m
            for m in self._migrations
            if m.version > current and (target is None or m.version <= target)
        ]

    def applied(self, current: int, target: int = 0) -> list[Migration]:
        """Migrations at or below ``current`` and above ``target``, descending."""
        return [
            m
            for m in reversed(self._migrations)
            if target < m.version <= current
        ]
