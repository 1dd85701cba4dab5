"""SnapshotIndex implementations."""

from gestao_demandas.backup.stores.inmemory import InMemorySnapshotIndex
from gestao_demandas.backup.stores.postgres import PostgresSnapshotIndex

__all__ = ["InMemorySnapshotIndex", "PostgresSnapshotIndex"]
