"""Demanda use cases.

Coordinates the validation gate, the store, the audit recorder and the
snapshot manager. Audit writes and most snapshots are fire-and-forget; the
pre-delete snapshot is awaited so it captures the record being removed.
"""

from collections.abc import Mapping
from typing import Any

import pydantic

from gestao_demandas.audit.models import AuditAction
from gestao_demandas.audit.recorder import AuditRecorder
from gestao_demandas.backup.manager import SnapshotManager
from gestao_demandas.backup.models import SnapshotKind
from gestao_demandas.db.errors import ConflictError, NotFoundError
from gestao_demandas.demandas.models import (
    Demanda,
    DemandaFilters,
    DemandaPage,
    DemandaStatistics,
    PageRequest,
    SortSpec,
    StatusDemanda,
)
from gestao_demandas.demandas.store import DemandaStore
from gestao_demandas.demandas.tags import generate_tag
from gestao_demandas.demandas.validation import DemandaValidationError, validate_demanda
from gestao_demandas.observability.logging import get_logger
from gestao_demandas.observability.metrics import DEMANDA_MUTATIONS
from gestao_demandas.utils.dates import parse_date, utc_now

logger = get_logger(__name__)

AUDIT_TABLE = "demandas"
CRITICAL_STATUSES = frozenset({StatusDemanda.APROVADA, StatusDemanda.REPROVADA})
# Keys a client may send on update but that never change.
IMMUTABLE_KEYS = frozenset({"id", "dataCriacao", "criadoPor"})


def _build(data: Mapping[str, Any]) -> Demanda:
    """Build a Demanda, turning type errors into user-facing messages."""
    try:
        return Demanda.model_validate(data)
    except pydantic.ValidationError as e:
        raise DemandaValidationError(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        ) from e


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _due_date_changed(changes: Mapping[str, Any], current: Demanda) -> bool:
    if "dataLimite" not in changes:
        return False
    try:
        return parse_date(changes["dataLimite"]) != current.data_limite
    except ValueError:
        # the gate reports the malformed date
        return True


class DemandaService:
    """Create, update, delete, list, search and aggregate demandas."""

    def __init__(
        self,
        store: DemandaStore,
        audit: AuditRecorder,
        snapshots: SnapshotManager,
    ) -> None:
        self._store = store
        self._audit = audit
        self._snapshots = snapshots

    @property
    def store(self) -> DemandaStore:
        return self._store

    async def list_demandas(
        self,
        filters: DemandaFilters,
        sort: SortSpec,
        page: PageRequest,
    ) -> DemandaPage:
        """Return a filtered, sorted page of records."""
        return await self._store.list_page(filters, sort, page)

    async def get_demanda(self, demanda_id: int) -> Demanda:
        """Get a record by ID, raising NotFoundError if absent."""
        return await self._store.get(demanda_id)

    async def create_demanda(
        self,
        payload: Mapping[str, Any],
        *,
        actor_id: int | None = None,
        origin: str | None = None,
    ) -> Demanda:
        """Validate and insert a new record.

        Generates the tag, stamps creation/update times, defaults the status
        to ``pendente`` and records the creator. Schedules a CREATE audit
        entry and an automatic snapshot.

        Raises:
            DemandaValidationError: If the payload breaks a business rule
            ConflictError: If the tag is already taken
        """
        payload = Demanda.wire_keys(payload)
        errors = validate_demanda(payload)
        if errors:
            DEMANDA_MUTATIONS.labels(action="create", outcome="invalid").inc()
            raise DemandaValidationError(errors)

        now = utc_now()
        data = {k: v for k, v in payload.items() if k != "id"}
        if _blank(data.get("tag")):
            data["tag"] = generate_tag(now)
        data["dataCriacao"] = data.get("dataCriacao") or now
        data["dataAtualizacao"] = now
        data["status"] = data.get("status") or StatusDemanda.PENDENTE.value
        data["criadoPor"] = data.get("funcionarioId")
        data["atualizadoPor"] = None

        try:
            created = await self._store.create(_build(data))
        except ConflictError:
            DEMANDA_MUTATIONS.labels(action="create", outcome="conflict").inc()
            raise

        DEMANDA_MUTATIONS.labels(action="create", outcome="success").inc()
        logger.info("demanda_created", demanda_id=created.id, tag=created.tag)

        self._audit.record(
            AuditAction.CREATE,
            AUDIT_TABLE,
            created.id,
            None,
            created.to_json(),
            actor_id,
            origin,
        )
        self._snapshots.schedule(SnapshotKind.AUTO)
        return created

    async def update_demanda(
        self,
        demanda_id: int,
        payload: Mapping[str, Any],
        *,
        actor_id: int | None = None,
        origin: str | None = None,
    ) -> Demanda:
        """Merge a partial payload into an existing record.

        ID, creation time and creator are preserved. The merged record goes
        through the validation gate; a past due date is only rejected when
        the payload changes it.

        Raises:
            NotFoundError: If no record has this ID
            DemandaValidationError: If the merged record breaks a business rule
        """
        changes = {
            k: v for k, v in Demanda.wire_keys(payload).items() if k not in IMMUTABLE_KEYS
        }
        # A record keeps its tag unless a new non-blank one is sent
        if "tag" in changes and _blank(changes["tag"]):
            del changes["tag"]
        now = utc_now()

        def apply(current: Demanda) -> Demanda:
            merged = current.to_json()
            merged.update(changes)
            errors = validate_demanda(
                merged, check_due_date=_due_date_changed(changes, current)
            )
            if errors:
                raise DemandaValidationError(errors)
            merged["id"] = current.id
            merged["dataCriacao"] = current.data_criacao
            merged["criadoPor"] = current.criado_por
            merged["dataAtualizacao"] = now
            merged["atualizadoPor"] = actor_id
            return _build(merged)

        try:
            before, after = await self._store.update(demanda_id, apply)
        except DemandaValidationError:
            DEMANDA_MUTATIONS.labels(action="update", outcome="invalid").inc()
            raise
        except NotFoundError:
            DEMANDA_MUTATIONS.labels(action="update", outcome="not_found").inc()
            raise

        DEMANDA_MUTATIONS.labels(action="update", outcome="success").inc()
        logger.info(
            "demanda_updated",
            demanda_id=demanda_id,
            status_before=before.status.value,
            status_after=after.status.value,
        )

        self._audit.record(
            AuditAction.UPDATE,
            AUDIT_TABLE,
            demanda_id,
            before.to_json(),
            after.to_json(),
            actor_id,
            origin,
        )
        if after.status in CRITICAL_STATUSES:
            self._snapshots.schedule(SnapshotKind.STATUS_CHANGE)
        return after

    async def delete_demanda(
        self,
        demanda_id: int,
        *,
        actor_id: int | None = None,
        origin: str | None = None,
    ) -> Demanda:
        """Remove a record after snapshotting the table.

        The snapshot is best-effort: a failure is logged and the delete
        proceeds.

        Raises:
            NotFoundError: If no record has this ID
        """
        try:
            await self._store.get(demanda_id)
        except NotFoundError:
            DEMANDA_MUTATIONS.labels(action="delete", outcome="not_found").inc()
            raise

        await self._snapshots.snapshot_safely(SnapshotKind.DELETE)
        removed = await self._store.delete(demanda_id)

        DEMANDA_MUTATIONS.labels(action="delete", outcome="success").inc()
        logger.info("demanda_deleted", demanda_id=demanda_id, tag=removed.tag)

        self._audit.record(
            AuditAction.DELETE,
            AUDIT_TABLE,
            demanda_id,
            removed.to_json(),
            None,
            actor_id,
            origin,
        )
        return removed

    async def search(self, query: str | None, limit: int) -> list[Demanda]:
        """Ranked substring search; short or missing queries return nothing."""
        if not query:
            return []
        return await self._store.search(query, limit)

    async def statistics(self, window_days: int) -> DemandaStatistics:
        """Aggregates over records created in the last ``window_days`` days."""
        return await self._store.statistics(window_days, utc_now())
