"""In-memory database fakes for testing the engine without a driver.

FakeDatabase records every call in ``events`` so tests can assert on
ordering and transaction boundaries. Failures are injected with the
``fail_on`` / ``fail_begin`` / ``fail_commit`` / ``fail_rollback`` knobs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class FakeDatabaseError(Exception):
    """Error raised by the fakes for injected failures."""

    pass


@dataclass
class FakeTransaction:
    """Fake transaction that records into its parent database."""

    db: "FakeDatabase"
    finished: bool = False

    def execute(self, statement: str, *args: Any) -> int:
        return self.db._execute(statement, args, in_tx=True)

    def query(self, statement: str, *args: Any) -> list[tuple]:
        self.db._execute(statement, args, in_tx=True)
        return []

    def commit(self) -> None:
        self.db.events.append(("commit",))
        if self.db.fail_commit:
            raise FakeDatabaseError("commit failed")
        self.finished = True
        self.db.committed.extend(self.db._pending)
        self.db._pending = []

    def rollback(self) -> None:
        self.db.events.append(("rollback",))
        if self.db.fail_rollback:
            raise FakeDatabaseError("rollback failed")
        self.finished = True
        self.db._pending = []


@dataclass
class FakeDatabase:
    """Fake Database capturing executed statements.

    Attributes:
        events: Every begin/execute/commit/rollback in call order.
        committed: Statements that became durable, in order.
        fail_on: Substring; executing a statement containing it fails.
    """

    fail_on: str | None = None
    fail_begin: bool = False
    fail_commit: bool = False
    fail_rollback: bool = False
    events: list[tuple] = field(default_factory=list)
    committed: list[tuple[str, tuple]] = field(default_factory=list)
    _pending: list[tuple[str, tuple]] = field(default_factory=list)

    def begin_transaction(self) -> FakeTransaction:
        self.events.append(("begin",))
        if self.fail_begin:
            raise FakeDatabaseError("cannot begin")
        return FakeTransaction(self)

    def execute(self, statement: str, *args: Any) -> int:
        return self._execute(statement, args, in_tx=False)

    def query(self, statement: str, *args: Any) -> list[tuple]:
        self._execute(statement, args, in_tx=False)
        return []

    def _execute(self, statement: str, args: tuple, in_tx: bool) -> int:
        self.events.append(("execute", statement, args, in_tx))
        if self.fail_on is not None and self.fail_on in statement:
            raise FakeDatabaseError(f"cannot execute {statement!r}")
        if in_tx:
            self._pending.append((statement, args))
        else:
            self.committed.append((statement, args))
        return 1

    @property
    def executed(self) -> list[str]:
        """Statements passed to execute, in order."""
        return [event[1] for event in self.events if event[0] == "execute"]

    @property
    def kinds(self) -> list[str]:
        """Event kinds in order, e.g. ["begin", "execute", "commit"]."""
        return [event[0] for event in self.events]
