"""DemandaStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from gestao_demandas.demandas.models import (
    Demanda,
    DemandaFilters,
    DemandaPage,
    DemandaStatistics,
    PageRequest,
    RestoreResult,
    SortSpec,
)

MIN_SEARCH_LENGTH = 2


class DemandaStore(ABC):
    """Abstract interface for demanda persistence.

    Identifiers are assigned by the store and never reused. Tags are unique;
    writing a duplicate tag raises ConflictError.
    """

    @abstractmethod
    async def list_page(
        self,
        filters: DemandaFilters,
        sort: SortSpec,
        page: PageRequest,
    ) -> DemandaPage:
        """Return one page of records matching the filters."""
        pass

    @abstractmethod
    async def get(self, demanda_id: int) -> Demanda:
        """Get a record by ID.

        Raises:
            NotFoundError: If no record has this ID
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored records."""
        pass

    @abstractmethod
    async def list_all(self) -> list[Demanda]:
        """Every stored record ordered by ID."""
        pass

    @abstractmethod
    async def create(self, demanda: Demanda) -> Demanda:
        """Insert a record, returning it with its new ID.

        Raises:
            ConflictError: If the tag is already taken
        """
        pass

    @abstractmethod
    async def update(
        self,
        demanda_id: int,
        apply: Callable[[Demanda], Demanda],
    ) -> tuple[Demanda, Demanda]:
        """Atomically read, transform and write a record.

        ``apply`` receives a copy of the current record and returns the new
        one; anything it raises aborts the update with no change.

        Returns:
            (before, after) pair

        Raises:
            NotFoundError: If no record has this ID
            ConflictError: If the new tag belongs to another record
        """
        pass

    @abstractmethod
    async def delete(self, demanda_id: int) -> Demanda:
        """Remove a record, returning what was removed.

        Raises:
            NotFoundError: If no record has this ID
        """
        pass

    @abstractmethod
    async def search(self, query: str, limit: int) -> list[Demanda]:
        """Case-insensitive substring search over title, description and tag.

        Title matches rank before description matches, which rank before tag
        matches; ties are ordered by due date ascending. Queries shorter than
        two characters return nothing.
        """
        pass

    @abstractmethod
    async def statistics(self, window_days: int, now: datetime) -> DemandaStatistics:
        """Aggregate counts over records created in the trailing window."""
        pass

    @abstractmethod
    async def replace_all(self, records: list[Demanda]) -> RestoreResult:
        """Delete every record, then insert the given ones with new IDs.

        Records that cannot be inserted are counted as failed and skipped.
        """
        pass

    @abstractmethod
    async def integrity_check(self) -> str:
        """Return "ok" when the backend is healthy, a diagnostic otherwise."""
        pass
