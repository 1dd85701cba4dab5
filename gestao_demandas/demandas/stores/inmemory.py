"""In-memory implementation of DemandaStore."""

from collections.abc import Callable
from datetime import datetime, timedelta

from gestao_demandas.db.errors import ConflictError, NotFoundError
from gestao_demandas.demandas.models import (
    Demanda,
    DemandaFilters,
    DemandaPage,
    DemandaStatistics,
    PageRequest,
    RestoreResult,
    SortSpec,
    StatusDemanda,
)
from gestao_demandas.demandas.store import MIN_SEARCH_LENGTH, DemandaStore
from gestao_demandas.observability.logging import get_logger
from gestao_demandas.utils.dates import days_between

logger = get_logger(__name__)


def _sort_value(demanda: Demanda, attribute: str) -> object:
    value = getattr(demanda, attribute)
    return value.value if hasattr(value, "value") else value


class InMemoryDemandaStore(DemandaStore):
    """In-memory implementation of DemandaStore for testing and development.

    Uses dict storage with linear scans. Mutations never await between
    reading and writing, so each one is atomic on a single event loop.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._records: dict[int, Demanda] = {}
        self._next_id = 1

    def _copy(self, demanda: Demanda) -> Demanda:
        return demanda.model_copy(deep=True)

    def _require(self, demanda_id: int) -> Demanda:
        demanda = self._records.get(demanda_id)
        if demanda is None:
            raise NotFoundError(f"Demanda {demanda_id} não encontrada")
        return demanda

    def _check_tag(self, tag: str | None, owner_id: int | None) -> None:
        if tag is None:
            return
        for existing in self._records.values():
            if existing.tag == tag and existing.id != owner_id:
                raise ConflictError(f"Tag {tag} já existe")

    def _insert(self, demanda: Demanda) -> Demanda:
        self._check_tag(demanda.tag, None)
        stored = demanda.model_copy(update={"id": self._next_id}, deep=True)
        self._next_id += 1
        self._records[stored.id] = stored
        return self._copy(stored)

    async def list_page(
        self,
        filters: DemandaFilters,
        sort: SortSpec,
        page: PageRequest,
    ) -> DemandaPage:
        """Return one page of records matching the filters."""
        matched = [d for d in self._records.values() if filters.matches(d)]
        attribute = sort.field.attribute
        matched.sort(
            key=lambda d: (_sort_value(d, attribute), d.id),
            reverse=not sort.ascending,
        )
        items = matched[page.offset : page.offset + page.limit]
        return DemandaPage.build([self._copy(d) for d in items], page, len(matched))

    async def get(self, demanda_id: int) -> Demanda:
        """Get a record by ID."""
        return self._copy(self._require(demanda_id))

    async def count(self) -> int:
        """Number of stored records."""
        return len(self._records)

    async def list_all(self) -> list[Demanda]:
        """Every stored record ordered by ID."""
        return [self._copy(self._records[k]) for k in sorted(self._records)]

    async def create(self, demanda: Demanda) -> Demanda:
        """Insert a record, returning it with its new ID."""
        return self._insert(demanda)

    async def update(
        self,
        demanda_id: int,
        apply: Callable[[Demanda], Demanda],
    ) -> tuple[Demanda, Demanda]:
        """Atomically read, transform and write a record."""
        current = self._require(demanda_id)
        after = apply(self._copy(current))
        after = after.model_copy(update={"id": demanda_id})
        self._check_tag(after.tag, demanda_id)
        self._records[demanda_id] = after
        return self._copy(current), self._copy(after)

    async def delete(self, demanda_id: int) -> Demanda:
        """Remove a record, returning what was removed."""
        self._require(demanda_id)
        return self._records.pop(demanda_id)

    async def search(self, query: str, limit: int) -> list[Demanda]:
        """Case-insensitive substring search ranked by where it matched."""
        needle = query.strip().lower()
        if len(needle) < MIN_SEARCH_LENGTH:
            return []

        ranked: list[tuple[int, Demanda]] = []
        for demanda in self._records.values():
            if needle in demanda.nome_demanda.lower():
                ranked.append((1, demanda))
            elif needle in demanda.descricao.lower():
                ranked.append((2, demanda))
            elif demanda.tag and needle in demanda.tag.lower():
                ranked.append((3, demanda))

        ranked.sort(key=lambda pair: (pair[0], pair[1].data_limite, pair[1].id))
        return [self._copy(d) for _, d in ranked[:limit]]

    async def statistics(self, window_days: int, now: datetime) -> DemandaStatistics:
        """Aggregate counts over records created in the trailing window."""
        cutoff = now - timedelta(days=window_days)
        recent = [d for d in self._records.values() if d.data_criacao >= cutoff]

        def with_status(status: StatusDemanda) -> int:
            return sum(1 for d in recent if d.status == status)

        delays = [
            days_between(d.data_conclusao, d.data_limite)
            for d in recent
            if d.status == StatusDemanda.APROVADA and d.data_conclusao is not None
        ]
        return DemandaStatistics(
            total=len(recent),
            aprovadas=with_status(StatusDemanda.APROVADA),
            pendentes=with_status(StatusDemanda.PENDENTE),
            reprovadas=with_status(StatusDemanda.REPROVADA),
            em_analise=with_status(StatusDemanda.FINALIZADO_PENDENTE_APROVACAO),
            rotina=sum(1 for d in recent if d.is_rotina),
            media_dias_atraso=sum(delays) / len(delays) if delays else None,
        )

    async def replace_all(self, records: list[Demanda]) -> RestoreResult:
        """Delete every record, then insert the given ones with new IDs."""
        self._records.clear()
        result = RestoreResult()
        for record in records:
            try:
                self._insert(record.model_copy(update={"id": None}))
            except ConflictError as e:
                result.failed += 1
                logger.warning("restore_record_failed", tag=record.tag, error=str(e))
            else:
                result.restored += 1
        return result

    async def integrity_check(self) -> str:
        """In-memory storage is always consistent."""
        return "ok"
