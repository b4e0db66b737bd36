"""Type definitions for gosling."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Direction(Enum):
    """Direction a migration is run in."""

    UP = "up"
    DOWN = "down"

    @property
    def is_up(self) -> bool:
        return self is Direction.UP


class MigrationKind(Enum):
    """How a migration's body is authored."""

    SCRIPT = "sql"
    FUNCTION = "py"


class RunOutcome(Enum):
    """Reported outcome of one migration run in one direction."""

    APPLIED = "applied"
    APPLIED_EMPTY = "applied-empty"
    FAILED = "failed"
    INDETERMINATE = "indeterminate"


@dataclass
class MigrationRecord:
    """One row of the version table."""

    version_id: int
    applied_at: Optional[datetime]
    is_applied: bool


@dataclass
class RunResult:
    """Result of a successful migration run.

    Attributes:
        version: Version number of the migration.
        source: Path or label the migration came from.
        direction: Direction the migration was run in.
        outcome: APPLIED, or APPLIED_EMPTY when there was nothing to execute.
        statement_count: Number of SQL statements executed (0 for functions).
        duration_ms: Wall-clock time spent in the run.
    """

    version: int
    source: str
    direction: Direction
    outcome: RunOutcome
    statement_count: int = 0
    duration_ms: float = 0.0

    @property
    def empty(self) -> bool:
        return self.outcome is RunOutcome.APPLIED_EMPTY


@dataclass
class MigrationStatus:
    """Applied state of one known migration, for status reports."""

    version: int
    source: str
    applied: bool = False
    applied_at: Optional[datetime] = None
