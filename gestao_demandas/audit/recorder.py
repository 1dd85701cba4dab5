"""Best-effort audit recording.

Audit writes run as fire-and-forget tasks: the request that triggered them
never waits for, nor fails because of, the audit log.
"""

import asyncio
from typing import Any

from gestao_demandas.audit.models import AuditAction, AuditEntry
from gestao_demandas.audit.store import AuditStore
from gestao_demandas.observability.logging import get_logger
from gestao_demandas.observability.metrics import AUDIT_WRITE_FAILURES
from gestao_demandas.utils.tasks import BackgroundTaskSet

logger = get_logger(__name__)


class AuditRecorder:
    """Schedules audit entries for background persistence."""

    def __init__(self, store: AuditStore) -> None:
        self._store = store
        self._tasks = BackgroundTaskSet("audit")

    @property
    def store(self) -> AuditStore:
        return self._store

    def record(
        self,
        action: AuditAction,
        table: str,
        record_id: int,
        before: dict[str, Any] | None,
        after: dict[str, Any] | None,
        actor_id: int | None = None,
        origin: str | None = None,
    ) -> asyncio.Task[None]:
        """Schedule an audit entry and return immediately."""
        return self._tasks.spawn(
            self._write(action, table, record_id, before, after, actor_id, origin),
            name=f"audit-{action.value}-{record_id}",
        )

    async def _write(
        self,
        action: AuditAction,
        table: str,
        record_id: int,
        before: dict[str, Any] | None,
        after: dict[str, Any] | None,
        actor_id: int | None,
        origin: str | None,
    ) -> None:
        try:
            entry = AuditEntry(
                acao=action,
                tabela=table,
                registro_id=record_id,
                dados_antigos=before,
                dados_novos=after,
                usuario_id=actor_id,
                ip=origin,
            )
            saved = await self._store.save_entry(entry)
        except Exception as e:
            AUDIT_WRITE_FAILURES.labels(action=action.value).inc()
            logger.error(
                "audit_write_failed",
                action=action.value,
                table=table,
                record_id=record_id,
                error=str(e),
            )
            return
        logger.debug("audit_entry_written", entry_id=saved.id, action=action.value)

    async def drain(self) -> None:
        """Wait for pending audit writes."""
        await self._tasks.drain()
