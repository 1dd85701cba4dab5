"""Fixtures for snapshot tests."""

from pathlib import Path

import pytest

from gestao_demandas.backup.manager import SnapshotManager
from gestao_demandas.backup.stores.inmemory import InMemorySnapshotIndex
from gestao_demandas.config.models.backup import BackupConfig
from gestao_demandas.demandas.stores.inmemory import InMemoryDemandaStore


@pytest.fixture
def store() -> InMemoryDemandaStore:
    return InMemoryDemandaStore()


@pytest.fixture
def index() -> InMemorySnapshotIndex:
    return InMemorySnapshotIndex()


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    return tmp_path / "backups"


@pytest.fixture
def manager(
    store: InMemoryDemandaStore, index: InMemorySnapshotIndex, backup_dir: Path
) -> SnapshotManager:
    return SnapshotManager(store, index, BackupConfig(directory=backup_dir))
