"""SnapshotIndex abstract interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from gestao_demandas.backup.models import SnapshotKind, SnapshotRecord


class SnapshotIndex(ABC):
    """Abstract interface for the catalog of snapshot files."""

    @abstractmethod
    async def register(self, record: SnapshotRecord) -> SnapshotRecord:
        """Add an entry, returning it with its assigned ID."""
        pass

    @abstractmethod
    async def get(self, snapshot_id: int) -> SnapshotRecord | None:
        """Get an entry by ID."""
        pass

    @abstractmethod
    async def list_snapshots(self) -> list[SnapshotRecord]:
        """Every entry, newest first."""
        pass

    @abstractmethod
    async def list_by_kind(self, kind: SnapshotKind) -> list[SnapshotRecord]:
        """Entries of one kind, newest first."""
        pass

    @abstractmethod
    async def list_older_than(self, cutoff: datetime) -> list[SnapshotRecord]:
        """Entries created strictly before the cutoff."""
        pass

    @abstractmethod
    async def delete_many(self, snapshot_ids: list[int]) -> int:
        """Remove entries, returning how many were removed."""
        pass
