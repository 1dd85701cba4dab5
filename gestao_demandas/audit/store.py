"""AuditStore abstract interface."""

from abc import ABC, abstractmethod

from gestao_demandas.audit.models import AuditAction, AuditEntry


class AuditStore(ABC):
    """Abstract interface for the append-only audit log."""

    @abstractmethod
    async def save_entry(self, entry: AuditEntry) -> AuditEntry:
        """Append an entry, returning it with its assigned ID."""
        pass

    @abstractmethod
    async def get_entry(self, entry_id: int) -> AuditEntry | None:
        """Get an entry by ID."""
        pass

    @abstractmethod
    async def list_entries(
        self,
        *,
        tabela: str | None = None,
        registro_id: int | None = None,
        acao: AuditAction | None = None,
        limit: int = 100,
    ) -> list[AuditEntry]:
        """List entries oldest first with optional filters."""
        pass
