"""Fixtures wiring a DemandaService over in-memory stores."""

from pathlib import Path

import pytest

from gestao_demandas.audit.recorder import AuditRecorder
from gestao_demandas.audit.stores.inmemory import InMemoryAuditStore
from gestao_demandas.backup.manager import SnapshotManager
from gestao_demandas.backup.stores.inmemory import InMemorySnapshotIndex
from gestao_demandas.config.models.backup import BackupConfig
from gestao_demandas.demandas.service import DemandaService
from gestao_demandas.demandas.stores.inmemory import InMemoryDemandaStore


@pytest.fixture
def demanda_store() -> InMemoryDemandaStore:
    return InMemoryDemandaStore()


@pytest.fixture
def audit_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture
def snapshot_index() -> InMemorySnapshotIndex:
    return InMemorySnapshotIndex()


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    return tmp_path / "backups"


@pytest.fixture
def recorder(audit_store: InMemoryAuditStore) -> AuditRecorder:
    return AuditRecorder(audit_store)


@pytest.fixture
def snapshots(
    demanda_store: InMemoryDemandaStore,
    snapshot_index: InMemorySnapshotIndex,
    backup_dir: Path,
) -> SnapshotManager:
    return SnapshotManager(demanda_store, snapshot_index, BackupConfig(directory=backup_dir))


@pytest.fixture
def service(
    demanda_store: InMemoryDemandaStore,
    recorder: AuditRecorder,
    snapshots: SnapshotManager,
) -> DemandaService:
    return DemandaService(demanda_store, recorder, snapshots)
