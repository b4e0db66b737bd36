"""Migration execution engine.

Runs one migration in one direction and updates the version table as part
of the same unit of work. In transactional mode the payload and the
version row share a transaction, so a failure leaves no trace. In
non-transactional mode each statement is durable on its own and the version
row is written last, only when every statement succeeded.

The engine does not check whether a migration is already applied and never
retries; both are the caller's concern.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from ..app.protocols import Database, Dialect, Executor, MigrationFunc, Transaction
from ..core.exceptions import (
    CommitFailedError,
    DeadlineExceededError,
    GoslingError,
    IndeterminateError,
    MigrationFailedError,
    NotRegisteredError,
    SourceUnavailableError,
    VersionRecordFailedError,
)
from ..core.types import Direction, MigrationKind, RunOutcome, RunResult
from .model import FunctionBody, Migration, ScriptBody
from .parser import parse_script
from .registry import MigrationRegistry

Step = tuple[str, Callable[[Executor], Any]]


class MigrationEngine:
    """Executes single migrations against a database.

    Example:
        engine = MigrationEngine(db, get_dialect("sqlite3"), registry)
        result = engine.run(migration, Direction.UP)
        if result.empty:
            print(f"{migration.name} had nothing to run")
    """

    def __init__(
        self,
        db: Database,
        dialect: Dialect,
        registry: MigrationRegistry | None = None,
    ):
        """Initialize the engine.

        Args:
            db: Execution capability the migrations run against.
            dialect: Source of the version-table statements.
            registry: Registered function migrations.
        """
        self.db = db
        self.dialect = dialect
        self.registry = registry if registry is not None else MigrationRegistry()

    def up(self, migration: Migration, deadline: float | None = None) -> RunResult:
        """Apply a migration."""
        return self.run(migration, Direction.UP, deadline=deadline)

    def down(self, migration: Migration, deadline: float | None = None) -> RunResult:
        """Revert a migration."""
        return self.run(migration, Direction.DOWN, deadline=deadline)

    def run(
        self,
        migration: Migration,
        direction: Direction,
        *,
        deadline: float | None = None,
    ) -> RunResult:
        """Run one migration in one direction.

        Args:
            migration: Migration to run.
            direction: UP to apply, DOWN to revert.
            deadline: Optional ``time.monotonic()`` value after which the run
                is abandoned (and rolled back when transactional).

        Returns:
            RunResult with outcome APPLIED, or APPLIED_EMPTY when the
            direction has no statements or no function.

        Raises:
            MalformedScriptError: If the script cannot be parsed.
            SourceUnavailableError: If the script cannot be read.
            NotRegisteredError: If a function migration has no callables.
            MigrationFailedError: If the payload failed; nothing was recorded.
            VersionRecordFailedError: If a non-transactional payload was
                applied but the version row could not be written.
            IndeterminateError: If a rollback failed after an error.
            CommitFailedError: If the commit failed; applied state unknown.
        """
        started = time.monotonic()
        try:
            if migration.kind is MigrationKind.SCRIPT:
                steps, use_tx = self._script_steps(migration, direction)
            else:
                steps, use_tx = self._function_steps(migration, direction)

            if migration.transactional and use_tx:
                self._run_in_transaction(migration, direction, steps, deadline)
            else:
                self._run_without_transaction(migration, direction, steps, deadline)
        except GoslingError as e:
            logger.error(f"FAIL  {migration.name} ({direction.value}): {e}")
            raise

        empty = not steps
        result = RunResult(
            version=migration.version,
            source=migration.source,
            direction=direction,
            outcome=RunOutcome.APPLIED_EMPTY if empty else RunOutcome.APPLIED,
            statement_count=len(steps) if migration.kind is MigrationKind.SCRIPT else 0,
            duration_ms=(time.monotonic() - started) * 1000,
        )
        if empty:
            logger.info(f"EMPTY {migration.name} ({direction.value})")
        else:
            logger.info(f"OK    {migration.name} ({direction.value})")
        return result

    # -------------------------------------------------------------------------
    # Payload preparation
    # -------------------------------------------------------------------------

    def _script_steps(
        self, migration: Migration, direction: Direction
    ) -> tuple[list[Step], bool]:
        body = migration.body
        path = body.path if isinstance(body, ScriptBody) else Path(migration.source)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnavailableError(
                f"{migration.name}: cannot read migration script: {e}",
                migration.version,
                migration.source,
            ) from e

        parsed = parse_script(text, direction)
        logger.debug(
            f"Parsed {len(parsed.statements)} {direction.value} statement(s) "
            f"from {migration.name} (use_tx={parsed.use_tx})"
        )
        steps = [(statement, _statement_step(statement)) for statement in parsed.statements]
        return steps, parsed.use_tx

    def _function_steps(
        self, migration: Migration, direction: Direction
    ) -> tuple[list[Step], bool]:
        body = migration.body
        if not isinstance(body, FunctionBody):
            body = self.registry.get(migration.version)
        if body is None:
            raise NotRegisteredError(
                f"{migration.name}: function migration {migration.version} is not registered",
                migration.version,
                migration.source,
            )

        fn: Optional[MigrationFunc] = body.up if direction.is_up else body.down
        if fn is None:
            return [], body.transactional
        label = getattr(fn, "__name__", repr(fn))
        return [(label, _function_step(fn, label))], body.transactional

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _run_in_transaction(
        self,
        migration: Migration,
        direction: Direction,
        steps: list[Step],
        deadline: float | None,
    ) -> None:
        try:
            tx = self.db.begin_transaction()
        except Exception as e:
            raise MigrationFailedError(
                f"{migration.name}: failed to begin transaction: {e}",
                migration.version,
                migration.source,
            ) from e

        try:
            self._execute_steps(tx, migration, steps, deadline, in_transaction=True)
            _check_deadline(deadline)
            try:
                self._record_version(tx, migration, direction)
            except Exception as e:
                raise MigrationFailedError(
                    f"{migration.name}: failed to update version table: {e}",
                    migration.version,
                    migration.source,
                ) from e
        except Exception as e:
            self._rollback(tx, migration, e)
            if isinstance(e, MigrationFailedError):
                raise
            raise MigrationFailedError(
                f"{migration.name}: {e}", migration.version, migration.source
            ) from e

        try:
            tx.commit()
        except Exception as e:
            rollback_error = None
            try:
                tx.rollback()
            except Exception as cleanup_error:
                rollback_error = cleanup_error
            raise CommitFailedError(
                f"{migration.name}: commit failed, applied state is unknown "
                f"and must be verified manually: {e}",
                migration.version,
                migration.source,
                rollback_error=rollback_error,
            ) from e

    def _run_without_transaction(
        self,
        migration: Migration,
        direction: Direction,
        steps: list[Step],
        deadline: float | None,
    ) -> None:
        self._execute_steps(self.db, migration, steps, deadline, in_transaction=False)
        try:
            self._record_version(self.db, migration, direction)
        except Exception as e:
            raise VersionRecordFailedError(
                f"{migration.name}: migration was applied but the version table "
                f"could not be updated: {e}",
                migration.version,
                migration.source,
            ) from e

    def _execute_steps(
        self,
        executor: Executor,
        migration: Migration,
        steps: list[Step],
        deadline: float | None,
        in_transaction: bool,
    ) -> None:
        for index, (label, step) in enumerate(steps, start=1):
            try:
                _check_deadline(deadline)
                step(executor)
            except Exception as e:
                raise MigrationFailedError(
                    f"{migration.name}: step {index} of {len(steps)} failed "
                    f"({_shorten(label)}): {e}",
                    migration.version,
                    migration.source,
                    state_may_have_changed=not in_transaction,
                ) from e

    def _record_version(
        self, executor: Executor, migration: Migration, direction: Direction
    ) -> None:
        if direction.is_up:
            executor.execute(self.dialect.insert_version_sql(), migration.version, True)
        else:
            executor.execute(self.dialect.delete_version_sql(), migration.version)

    def _rollback(self, tx: Transaction, migration: Migration, error: Exception) -> None:
        try:
            tx.rollback()
        except Exception as rollback_error:
            raise IndeterminateError(
                f"{migration.name}: {error}; rollback failed: {rollback_error}",
                migration.version,
                migration.source,
                rollback_error=rollback_error,
            ) from error


def _statement_step(statement: str) -> Callable[[Executor], Any]:
    def step(executor: Executor) -> Any:
        return executor.execute(statement)

    return step


def _function_step(fn: MigrationFunc, label: str) -> Callable[[Executor], Any]:
    def step(executor: Executor) -> Any:
        if fn(executor) is False:
            raise GoslingError(f"{label} reported failure")

    return step


def _check_deadline(deadline: float | None) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        raise DeadlineExceededError("deadline exceeded")


def _shorten(text: str, limit: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."
