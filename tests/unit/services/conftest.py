"""Pytest configuration and fixtures for service layer tests."""

import pytest
from pathlib import Path

from gosling.core.config import Config
from gosling.services import ServiceContainer


@pytest.fixture
def config(tmp_path: Path, migrations_dir: Path) -> Config:
    """Provide a Config instance for testing."""
    cfg = Config()
    cfg.db_path = tmp_path / "test.db"
    cfg.migrations_dir = migrations_dir
    return cfg


@pytest.fixture
def container(config: Config) -> ServiceContainer:
    """Provide a ServiceContainer instance (not connected)."""
    services = ServiceContainer(config)
    yield services
    services.close()
