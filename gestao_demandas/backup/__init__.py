"""JSON snapshots of the demand table and their restore."""

from gestao_demandas.backup.errors import BackupError, CorruptBackupError
from gestao_demandas.backup.manager import SnapshotManager
from gestao_demandas.backup.models import SnapshotEnvelope, SnapshotKind, SnapshotRecord
from gestao_demandas.backup.scheduler import SnapshotScheduler
from gestao_demandas.backup.store import SnapshotIndex

__all__ = [
    "BackupError",
    "CorruptBackupError",
    "SnapshotEnvelope",
    "SnapshotIndex",
    "SnapshotKind",
    "SnapshotManager",
    "SnapshotRecord",
    "SnapshotScheduler",
]
