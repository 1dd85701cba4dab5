"""In-memory implementation of SnapshotIndex."""

from datetime import datetime

from gestao_demandas.backup.models import SnapshotKind, SnapshotRecord
from gestao_demandas.backup.store import SnapshotIndex


class InMemorySnapshotIndex(SnapshotIndex):
    """In-memory implementation of SnapshotIndex for testing and development."""

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._records: dict[int, SnapshotRecord] = {}
        self._next_id = 1

    def _newest_first(self, records: list[SnapshotRecord]) -> list[SnapshotRecord]:
        return sorted(records, key=lambda r: (r.data_criacao, r.id), reverse=True)

    async def register(self, record: SnapshotRecord) -> SnapshotRecord:
        """Add an entry, returning it with its assigned ID."""
        saved = record.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._records[saved.id] = saved
        return saved

    async def get(self, snapshot_id: int) -> SnapshotRecord | None:
        """Get an entry by ID."""
        return self._records.get(snapshot_id)

    async def list_snapshots(self) -> list[SnapshotRecord]:
        """Every entry, newest first."""
        return self._newest_first(list(self._records.values()))

    async def list_by_kind(self, kind: SnapshotKind) -> list[SnapshotRecord]:
        """Entries of one kind, newest first."""
        return self._newest_first([r for r in self._records.values() if r.tipo == kind])

    async def list_older_than(self, cutoff: datetime) -> list[SnapshotRecord]:
        """Entries created strictly before the cutoff."""
        return [r for r in self._records.values() if r.data_criacao < cutoff]

    async def delete_many(self, snapshot_ids: list[int]) -> int:
        """Remove entries, returning how many were removed."""
        removed = 0
        for snapshot_id in snapshot_ids:
            if self._records.pop(snapshot_id, None) is not None:
                removed += 1
        return removed
