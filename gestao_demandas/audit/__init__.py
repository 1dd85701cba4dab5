"""Append-only audit trail of demanda mutations."""

from gestao_demandas.audit.models import AuditAction, AuditEntry
from gestao_demandas.audit.recorder import AuditRecorder
from gestao_demandas.audit.store import AuditStore

__all__ = ["AuditAction", "AuditEntry", "AuditRecorder", "AuditStore"]
