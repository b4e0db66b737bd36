"""Service layer for gosling."""

from .container import ServiceContainer
from .migrate import MigrationService

__all__ = [
    "MigrationService",
    "ServiceContainer",
]
