"""Application-level protocols for gosling."""

from .protocols import Database, Dialect, Executor, MigrationFunc, Transaction

__all__ = [
    "Database",
    "Dialect",
    "Executor",
    "MigrationFunc",
    "Transaction",
]
