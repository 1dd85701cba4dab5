"""PostgreSQL implementation of SnapshotIndex."""

from datetime import datetime

import asyncpg

from gestao_demandas.backup.models import SnapshotKind, SnapshotRecord
from gestao_demandas.backup.store import SnapshotIndex
from gestao_demandas.db.errors import ConnectionError
from gestao_demandas.db.pool import PostgresPool
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, nome_arquivo, data_backup, tamanho, tipo, data_criacao"


class PostgresSnapshotIndex(SnapshotIndex):
    """PostgreSQL implementation of SnapshotIndex backed by ``backups``."""

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize PostgreSQL snapshot index.

        Args:
            pool: Connected PostgresPool
        """
        self._pool = pool

    async def _fetch(self, operation: str, query: str, *args: object) -> list[SnapshotRecord]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_backup_index_error", operation=operation, error=str(e))
            raise ConnectionError(f"Failed to {operation} backups: {e}", cause=e) from e
        return [SnapshotRecord.model_validate(dict(r)) for r in rows]

    async def register(self, record: SnapshotRecord) -> SnapshotRecord:
        """Add an entry, returning it with its assigned ID."""
        rows = await self._fetch(
            "register",
            f"""
            INSERT INTO backups (nome_arquivo, data_backup, tamanho, tipo, data_criacao)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {_COLUMNS}
            """,
            record.nome_arquivo,
            record.data_backup,
            record.tamanho,
            record.tipo.value,
            record.data_criacao,
        )
        return rows[0]

    async def get(self, snapshot_id: int) -> SnapshotRecord | None:
        """Get an entry by ID."""
        rows = await self._fetch(
            "get", f"SELECT {_COLUMNS} FROM backups WHERE id = $1", snapshot_id
        )
        return rows[0] if rows else None

    async def list_snapshots(self) -> list[SnapshotRecord]:
        """Every entry, newest first."""
        return await self._fetch(
            "list", f"SELECT {_COLUMNS} FROM backups ORDER BY data_criacao DESC, id DESC"
        )

    async def list_by_kind(self, kind: SnapshotKind) -> list[SnapshotRecord]:
        """Entries of one kind, newest first."""
        return await self._fetch(
            "list",
            f"SELECT {_COLUMNS} FROM backups WHERE tipo = $1 "
            "ORDER BY data_criacao DESC, id DESC",
            kind.value,
        )

    async def list_older_than(self, cutoff: datetime) -> list[SnapshotRecord]:
        """Entries created strictly before the cutoff."""
        return await self._fetch(
            "list",
            f"SELECT {_COLUMNS} FROM backups WHERE data_criacao < $1 ORDER BY id",
            cutoff,
        )

    async def delete_many(self, snapshot_ids: list[int]) -> int:
        """Remove entries, returning how many were removed."""
        if not snapshot_ids:
            return 0
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    "DELETE FROM backups WHERE id = ANY($1::bigint[])", snapshot_ids
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_backup_index_error", operation="delete", error=str(e))
            raise ConnectionError(f"Failed to delete backups: {e}", cause=e) from e
        return int(result.split()[-1])
