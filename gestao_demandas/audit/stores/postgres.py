"""PostgreSQL implementation of AuditStore."""

import json
from typing import Any

import asyncpg

from gestao_demandas.audit.models import AuditAction, AuditEntry
from gestao_demandas.audit.store import AuditStore
from gestao_demandas.db.errors import ConnectionError
from gestao_demandas.db.pool import PostgresPool
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, acao, tabela, registro_id, dados_antigos, dados_novos, usuario_id, data_hora, ip"


def _dump_json(value: dict[str, Any] | None) -> str | None:
    return None if value is None else json.dumps(value, ensure_ascii=False)


class PostgresAuditStore(AuditStore):
    """PostgreSQL implementation of AuditStore backed by ``auditoria``."""

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize PostgreSQL audit store.

        Args:
            pool: Connected PostgresPool
        """
        self._pool = pool

    def _row_to_entry(self, row: asyncpg.Record) -> AuditEntry:
        data = dict(row)
        for column in ("dados_antigos", "dados_novos"):
            if isinstance(data.get(column), str):
                data[column] = json.loads(data[column])
        return AuditEntry.model_validate(data)

    async def save_entry(self, entry: AuditEntry) -> AuditEntry:
        """Append an entry, returning it with its assigned ID."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO auditoria (
                        acao, tabela, registro_id, dados_antigos, dados_novos,
                        usuario_id, data_hora, ip
                    ) VALUES ($1, $2, $3, $4::jsonb, $5::jsonb, $6, $7, $8)
                    RETURNING {_COLUMNS}
                    """,
                    entry.acao.value,
                    entry.tabela,
                    entry.registro_id,
                    _dump_json(entry.dados_antigos),
                    _dump_json(entry.dados_novos),
                    entry.usuario_id,
                    entry.data_hora,
                    entry.ip,
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_audit_save_error", error=str(e))
            raise ConnectionError(f"Failed to save audit entry: {e}", cause=e) from e
        return self._row_to_entry(row)

    async def get_entry(self, entry_id: int) -> AuditEntry | None:
        """Get an entry by ID."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM auditoria WHERE id = $1", entry_id
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_audit_get_error", entry_id=entry_id, error=str(e))
            raise ConnectionError(f"Failed to get audit entry: {e}", cause=e) from e
        return self._row_to_entry(row) if row else None

    async def list_entries(
        self,
        *,
        tabela: str | None = None,
        registro_id: int | None = None,
        acao: AuditAction | None = None,
        limit: int = 100,
    ) -> list[AuditEntry]:
        """List entries oldest first with optional filters."""
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (
            ("tabela", tabela),
            ("registro_id", registro_id),
            ("acao", acao.value if acao else None),
        ):
            if value is not None:
                params.append(value)
                clauses.append(f"{column} = ${len(params)}")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"SELECT {_COLUMNS} FROM auditoria {where} "
                    f"ORDER BY data_hora ASC, id ASC LIMIT ${len(params)}",
                    *params,
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_audit_list_error", error=str(e))
            raise ConnectionError(f"Failed to list audit entries: {e}", cause=e) from e
        return [self._row_to_entry(r) for r in rows]
