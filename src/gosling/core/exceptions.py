"""Custom exceptions for gosling."""

from .types import RunOutcome


class GoslingError(Exception):
    """Base exception for all gosling errors."""

    pass


class ConfigError(GoslingError):
    """Invalid configuration."""

    pass


class DatabaseError(GoslingError):
    """Database operation failed."""

    pass


# =============================================================================
# Identity resolution
# =============================================================================


class MigrationIdentityError(GoslingError):
    """Migration filename could not be resolved to a version."""

    def __init__(self, name: str, reason: str):
        """Initialize exception with the offending name.

        Args:
            name: Filename or source label that failed to resolve.
            reason: Human-readable description of the problem.
        """
        self.name = name
        super().__init__(f"{name}: {reason}")


class UnrecognizedKindError(MigrationIdentityError):
    """File extension is not a recognized migration type."""

    def __init__(self, name: str):
        super().__init__(name, "not a recognized migration file type")


class MissingSeparatorError(MigrationIdentityError):
    """Filename has no '_' separating the version from the name."""

    def __init__(self, name: str):
        super().__init__(name, "no separator found")


class InvalidVersionError(MigrationIdentityError):
    """Version component is not an integer greater than zero."""

    def __init__(self, name: str, reason: str = "migration IDs must be greater than zero"):
        super().__init__(name, reason)


# =============================================================================
# Parsing
# =============================================================================


class MalformedScriptError(GoslingError):
    """SQL migration script has invalid directive structure."""

    def __init__(self, message: str, line_number: int | None = None, line: str | None = None):
        """Initialize exception with line context.

        Args:
            message: Description of the problem.
            line_number: 1-based line number the problem was detected on.
            line: Text of the offending line.
        """
        self.message = message
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message}"
            if line is not None:
                message = f"{message}: {line.strip()!r}"
        super().__init__(message)


# =============================================================================
# Execution
# =============================================================================


class DeadlineExceededError(GoslingError):
    """The run's deadline passed before it finished."""

    pass


class ExecutionError(GoslingError):
    """Running a migration failed.

    Attributes:
        version: Version of the migration that failed.
        source: Source path or label of the migration.
        outcome: How the run must be reported.
    """

    outcome = RunOutcome.FAILED

    def __init__(self, message: str, version: int, source: str):
        self.version = version
        self.source = source
        super().__init__(message)


class SourceUnavailableError(ExecutionError):
    """Migration script could not be opened or read."""

    pass


class NotRegisteredError(ExecutionError):
    """Function migration has no registered callables."""

    pass


class MigrationFailedError(ExecutionError):
    """Migration payload failed.

    When ``state_may_have_changed`` is True the migration ran without a
    transaction, so statements before the failing one may be durable.
    """

    def __init__(
        self,
        message: str,
        version: int,
        source: str,
        state_may_have_changed: bool = False,
    ):
        super().__init__(message, version, source)
        self.state_may_have_changed = state_may_have_changed


class VersionRecordFailedError(ExecutionError):
    """Payload was applied but the version table could not be updated."""

    def __init__(self, message: str, version: int, source: str):
        super().__init__(message, version, source)
        self.state_may_have_changed = True


class IndeterminateError(ExecutionError):
    """Outcome of the run is unknown and needs manual verification."""

    outcome = RunOutcome.INDETERMINATE

    def __init__(
        self,
        message: str,
        version: int,
        source: str,
        rollback_error: BaseException | None = None,
    ):
        super().__init__(message, version, source)
        self.rollback_error = rollback_error


class CommitFailedError(IndeterminateError):
    """Commit of the migration transaction failed."""

    pass


# =============================================================================
# Orchestration
# =============================================================================


class MigrationLoadError(GoslingError):
    """Function migration module could not be imported."""

    pass


class MigrationNotFoundError(GoslingError):
    """Requested migration version does not exist."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"no migration with version {version}")


class DuplicateVersionError(GoslingError):
    """Two migrations share the same version number."""

    def __init__(self, version: int, first: str, second: str):
        self.version = version
        super().__init__(f"duplicate migration version {version}: {first} and {second}")
