"""Pytest configuration and shared fixtures."""

from unittest.mock import Mock

import pytest

from entity_persistence.infrastructure.config import PersistenceConfig
from entity_persistence.infrastructure.fs_directory_persistence import FSDirectoryPersistence
from entity_persistence.infrastructure.in_memory_entity_store import InMemoryEntityStore
from entity_persistence.infrastructure.in_memory_metrics import InMemoryMetrics
from entity_persistence.infrastructure.in_memory_persistence import InMemoryEntityPersistence
from entity_persistence.ports.logger import LoggerPort


@pytest.fixture
def mock_logger():
    """Create a mock logger port."""
    return Mock(spec=LoggerPort)


@pytest.fixture
def metrics():
    """Create a fresh in-memory metrics collector."""
    return InMemoryMetrics()


@pytest.fixture
def records():
    """Backing store shared by in-memory DAO instances."""
    return {}


@pytest.fixture
def memory_dao(records, mock_logger, metrics):
    """Create an in-memory DAO over the shared records."""
    return InMemoryEntityPersistence(records, logger=mock_logger, metrics=metrics)


@pytest.fixture
def fs_dao(tmp_path, mock_logger, metrics):
    """Create a file-system DAO in a temporary directory."""
    return FSDirectoryPersistence(tmp_path / "profiles", logger=mock_logger, metrics=metrics)


@pytest.fixture
def entity_store(mock_logger):
    """Create an empty in-memory entity collection."""
    return InMemoryEntityStore(logger=mock_logger)


@pytest.fixture
def persistence_config(tmp_path):
    """Create a config rooted in a temporary cache directory."""
    return PersistenceConfig(entity_type="tests.Profile", cache_root=tmp_path)
