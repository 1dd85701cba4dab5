"""AuditStore implementations."""

from gestao_demandas.audit.stores.inmemory import InMemoryAuditStore
from gestao_demandas.audit.stores.postgres import PostgresAuditStore

__all__ = ["InMemoryAuditStore", "PostgresAuditStore"]
