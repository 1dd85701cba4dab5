"""PostgreSQL implementation of DemandaStore.

Persists records in the ``demandas`` table created by ``db.schema``.
"""

import json
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import asyncpg

from gestao_demandas.db.errors import ConflictError, ConnectionError, NotFoundError
from gestao_demandas.db.pool import PostgresPool
from gestao_demandas.demandas.models import (
    Demanda,
    DemandaFilters,
    DemandaPage,
    DemandaStatistics,
    PageRequest,
    RestoreResult,
    SortSpec,
)
from gestao_demandas.demandas.store import MIN_SEARCH_LENGTH, DemandaStore
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)

# Every column except id, in insert order.
DATA_COLUMNS: tuple[str, ...] = (
    "tag",
    "nome_demanda",
    "funcionario_id",
    "nome_funcionario",
    "email_funcionario",
    "categoria",
    "prioridade",
    "complexidade",
    "descricao",
    "local",
    "data_criacao",
    "data_limite",
    "data_conclusao",
    "status",
    "is_rotina",
    "dias_semana",
    "atribuidos",
    "comentarios",
    "comentario_gestor",
    "data_atualizacao",
    "criado_por",
    "atualizado_por",
)
JSON_COLUMNS = frozenset({"dias_semana", "atribuidos"})
SELECT_COLUMNS = ", ".join(("id", *DATA_COLUMNS))

_INSERT_SQL = (
    f"INSERT INTO demandas ({', '.join(DATA_COLUMNS)}) "
    f"VALUES ({', '.join(f'${i}' for i in range(1, len(DATA_COLUMNS) + 1))}) "
    f"RETURNING {SELECT_COLUMNS}"
)
_UPDATE_SQL = (
    "UPDATE demandas SET "
    + ", ".join(f"{col} = ${i}" for i, col in enumerate(DATA_COLUMNS, start=2))
    + f" WHERE id = $1 RETURNING {SELECT_COLUMNS}"
)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresDemandaStore(DemandaStore):
    """PostgreSQL implementation of DemandaStore.

    Updates lock the target row with SELECT ... FOR UPDATE inside a
    transaction, so concurrent read-modify-write cycles serialize.
    """

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize PostgreSQL demanda store.

        Args:
            pool: Connected PostgresPool
        """
        self._pool = pool

    def _to_params(self, demanda: Demanda) -> list[Any]:
        """Convert a Demanda into positional parameters for DATA_COLUMNS."""
        params: list[Any] = []
        for column in DATA_COLUMNS:
            value = getattr(demanda, column)
            if column in JSON_COLUMNS:
                value = json.dumps(value, ensure_ascii=False)
            elif hasattr(value, "value"):  # Enum
                value = value.value
            params.append(value)
        return params

    def _row_to_demanda(self, row: asyncpg.Record) -> Demanda:
        data = dict(row)
        for column in JSON_COLUMNS:
            if isinstance(data.get(column), str):
                data[column] = json.loads(data[column])
        return Demanda.model_validate(data)

    def _build_where(self, filters: DemandaFilters) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        conditions = (
            ("status = ${}", filters.status),
            ("funcionario_id = ${}", filters.funcionario_id),
            ("categoria = ${}", filters.categoria),
            ("prioridade = ${}", filters.prioridade),
            ("data_criacao >= ${}", filters.data_inicio),
            ("data_criacao <= ${}", filters.data_fim),
        )
        for template, value in conditions:
            if value is None:
                continue
            params.append(value)
            clauses.append(template.format(len(params)))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def _wrap(self, operation: str, error: Exception) -> ConnectionError:
        logger.error("postgres_demanda_error", operation=operation, error=str(error))
        return ConnectionError(f"Failed to {operation} demanda: {error}", cause=error)

    async def list_page(
        self,
        filters: DemandaFilters,
        sort: SortSpec,
        page: PageRequest,
    ) -> DemandaPage:
        """Return one page of records matching the filters."""
        where, params = self._build_where(filters)
        column = sort.field.attribute
        direction = "ASC" if sort.ascending else "DESC"
        limit_index = len(params) + 1
        try:
            async with self._pool.acquire() as conn:
                total = await conn.fetchval(f"SELECT COUNT(*) FROM demandas{where}", *params)
                rows = await conn.fetch(
                    f"SELECT {SELECT_COLUMNS} FROM demandas{where} "
                    f"ORDER BY {column} {direction}, id {direction} "
                    f"LIMIT ${limit_index} OFFSET ${limit_index + 1}",
                    *params,
                    page.limit,
                    page.offset,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("list", e) from e
        return DemandaPage.build([self._row_to_demanda(r) for r in rows], page, total)

    async def get(self, demanda_id: int) -> Demanda:
        """Get a record by ID."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {SELECT_COLUMNS} FROM demandas WHERE id = $1", demanda_id
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("get", e) from e
        if row is None:
            raise NotFoundError(f"Demanda {demanda_id} não encontrada")
        return self._row_to_demanda(row)

    async def count(self) -> int:
        """Number of stored records."""
        try:
            async with self._pool.acquire() as conn:
                return await conn.fetchval("SELECT COUNT(*) FROM demandas")
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("count", e) from e

    async def list_all(self) -> list[Demanda]:
        """Every stored record ordered by ID."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(f"SELECT {SELECT_COLUMNS} FROM demandas ORDER BY id")
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("list_all", e) from e
        return [self._row_to_demanda(r) for r in rows]

    async def create(self, demanda: Demanda) -> Demanda:
        """Insert a record, returning it with its new ID."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(_INSERT_SQL, *self._to_params(demanda))
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(f"Tag {demanda.tag} já existe", cause=e) from e
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("create", e) from e
        created = self._row_to_demanda(row)
        logger.debug("demanda_inserted", demanda_id=created.id, tag=created.tag)
        return created

    async def update(
        self,
        demanda_id: int,
        apply: Callable[[Demanda], Demanda],
    ) -> tuple[Demanda, Demanda]:
        """Atomically read, transform and write a record."""
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    row = await conn.fetchrow(
                        f"SELECT {SELECT_COLUMNS} FROM demandas WHERE id = $1 FOR UPDATE",
                        demanda_id,
                    )
                    if row is None:
                        raise NotFoundError(f"Demanda {demanda_id} não encontrada")
                    before = self._row_to_demanda(row)
                    after = apply(before.model_copy(deep=True))
                    updated = await conn.fetchrow(
                        _UPDATE_SQL, demanda_id, *self._to_params(after)
                    )
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(f"Tag já existe: {e}", cause=e) from e
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("update", e) from e
        return before, self._row_to_demanda(updated)

    async def delete(self, demanda_id: int) -> Demanda:
        """Remove a record, returning what was removed."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"DELETE FROM demandas WHERE id = $1 RETURNING {SELECT_COLUMNS}",
                    demanda_id,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("delete", e) from e
        if row is None:
            raise NotFoundError(f"Demanda {demanda_id} não encontrada")
        return self._row_to_demanda(row)

    async def search(self, query: str, limit: int) -> list[Demanda]:
        """Case-insensitive substring search ranked by where it matched."""
        needle = query.strip()
        if len(needle) < MIN_SEARCH_LENGTH:
            return []
        pattern = f"%{escape_like(needle)}%"
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {SELECT_COLUMNS} FROM demandas
                    WHERE nome_demanda ILIKE $1 ESCAPE '\\'
                       OR descricao ILIKE $1 ESCAPE '\\'
                       OR tag ILIKE $1 ESCAPE '\\'
                    ORDER BY
                        CASE
                            WHEN nome_demanda ILIKE $1 ESCAPE '\\' THEN 1
                            WHEN descricao ILIKE $1 ESCAPE '\\' THEN 2
                            ELSE 3
                        END,
                        data_limite ASC,
                        id ASC
                    LIMIT $2
                    """,
                    pattern,
                    limit,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("search", e) from e
        return [self._row_to_demanda(r) for r in rows]

    async def statistics(self, window_days: int, now: datetime) -> DemandaStatistics:
        """Aggregate counts over records created in the trailing window."""
        cutoff = now - timedelta(days=window_days)
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT
                        COUNT(*) AS total,
                        COUNT(*) FILTER (WHERE status = 'aprovada') AS aprovadas,
                        COUNT(*) FILTER (WHERE status = 'pendente') AS pendentes,
                        COUNT(*) FILTER (WHERE status = 'reprovada') AS reprovadas,
                        COUNT(*) FILTER (
                            WHERE status = 'finalizado_pendente_aprovacao'
                        ) AS em_analise,
                        COUNT(*) FILTER (WHERE is_rotina) AS rotina,
                        AVG(
                            EXTRACT(EPOCH FROM (
                                data_conclusao - (data_limite::timestamp AT TIME ZONE 'UTC')
                            )) / 86400.0
                        ) FILTER (
                            WHERE status = 'aprovada' AND data_conclusao IS NOT NULL
                        ) AS media_dias_atraso
                    FROM demandas
                    WHERE data_criacao >= $1
                    """,
                    cutoff,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("aggregate", e) from e
        data = dict(row)
        if data["media_dias_atraso"] is not None:
            data["media_dias_atraso"] = float(data["media_dias_atraso"])
        return DemandaStatistics.model_validate(data)

    async def replace_all(self, records: list[Demanda]) -> RestoreResult:
        """Delete every record, then insert the given ones with new IDs.

        Runs in one transaction; each insert gets its own savepoint so a bad
        record is skipped without aborting the rest.
        """
        result = RestoreResult()
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("DELETE FROM demandas")
                    for record in records:
                        try:
                            async with conn.transaction():
                                await conn.execute(_INSERT_SQL, *self._to_params(record))
                        except (
                            asyncpg.IntegrityConstraintViolationError,
                            asyncpg.DataError,
                        ) as e:
                            result.failed += 1
                            logger.warning(
                                "restore_record_failed", tag=record.tag, error=str(e)
                            )
                        else:
                            result.restored += 1
        except (asyncpg.PostgresError, OSError) as e:
            raise self._wrap("restore", e) from e
        return result

    async def integrity_check(self) -> str:
        """Probe the table with a trivial query."""
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1 FROM demandas LIMIT 1")
        except (asyncpg.PostgresError, OSError) as e:
            return f"error: {e}"
        return "ok"
