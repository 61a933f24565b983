"""Shared fixtures: a master and a backup SQLite database per test."""

import shutil
import tempfile
from pathlib import Path

import pytest

from dbsync.models.config import BACKUP, MASTER
from dbsync.providers import get_engine
from dbsync.storage.data_sources import DataSourceRegistry


@pytest.fixture
def temp_dir():
    """Create a temporary directory for database files and uploads."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def master_engine(temp_dir):
    engine = get_engine(f"sqlite:///{temp_dir / 'master.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def backup_engine(temp_dir):
    engine = get_engine(f"sqlite:///{temp_dir / 'backup.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def registry(master_engine, backup_engine):
    """Registry with both handles pointing at the per-test databases."""
    return DataSourceRegistry({MASTER: master_engine, BACKUP: backup_engine})


@pytest.fixture
def unreachable_registry(temp_dir):
    """Registry whose databases live in a directory that does not exist."""
    missing = temp_dir / "missing"
    engines = {
        MASTER: get_engine(f"sqlite:///{missing / 'master.db'}"),
        BACKUP: get_engine(f"sqlite:///{missing / 'backup.db'}"),
    }
    yield DataSourceRegistry(engines)
    for engine in engines.values():
        engine.dispose()
