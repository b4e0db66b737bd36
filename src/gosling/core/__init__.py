"""Core types, configuration and exceptions for gosling."""

from .config import DEFAULT_TABLE_NAME, Config
from .exceptions import (
    CommitFailedError,
    ConfigError,
    DatabaseError,
    DeadlineExceededError,
    DuplicateVersionError,
    ExecutionError,
    GoslingError,
    IndeterminateError,
    InvalidVersionError,
    MalformedScriptError,
    MigrationFailedError,
    MigrationIdentityError,
    MigrationLoadError,
    MigrationNotFoundError,
    MissingSeparatorError,
    NotRegisteredError,
    SourceUnavailableError,
    UnrecognizedKindError,
    VersionRecordFailedError,
)
from .types import (
    Direction,
    MigrationKind,
    MigrationRecord,
    MigrationStatus,
    RunOutcome,
    RunResult,
)

__all__ = [
    "Config",
    "DEFAULT_TABLE_NAME",
    "GoslingError",
    "ConfigError",
    "DatabaseError",
    "MigrationIdentityError",
    "UnrecognizedKindError",
    "MissingSeparatorError",
    "InvalidVersionError",
    "MalformedScriptError",
    "DeadlineExceededError",
    "ExecutionError",
    "SourceUnavailableError",
    "NotRegisteredError",
    "MigrationFailedError",
    "VersionRecordFailedError",
    "IndeterminateError",
    "CommitFailedError",
    "MigrationLoadError",
    "MigrationNotFoundError",
    "DuplicateVersionError",
    "Direction",
    "MigrationKind",
    "MigrationRecord",
    "MigrationStatus",
    "RunOutcome",
    "RunResult",
]
