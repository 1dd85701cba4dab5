"""In-memory implementation of AuditStore."""

from gestao_demandas.audit.models import AuditAction, AuditEntry
from gestao_demandas.audit.store import AuditStore


class InMemoryAuditStore(AuditStore):
    """In-memory implementation of AuditStore for testing and development."""

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._entries: list[AuditEntry] = []

    async def save_entry(self, entry: AuditEntry) -> AuditEntry:
        """Append an entry, returning it with its assigned ID."""
        saved = entry.model_copy(update={"id": len(self._entries) + 1})
        self._entries.append(saved)
        return saved

    async def get_entry(self, entry_id: int) -> AuditEntry | None:
        """Get an entry by ID."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    async def list_entries(
        self,
        *,
        tabela: str | None = None,
        registro_id: int | None = None,
        acao: AuditAction | None = None,
        limit: int = 100,
    ) -> list[AuditEntry]:
        """List entries oldest first with optional filters."""
        results = []
        for entry in self._entries:
            if tabela is not None and entry.tabela != tabela:
                continue
            if registro_id is not None and entry.registro_id != registro_id:
                continue
            if acao is not None and entry.acao != acao:
                continue
            results.append(entry)
        return results[:limit]
