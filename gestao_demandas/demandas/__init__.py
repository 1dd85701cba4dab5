"""Demand records: models, validation, persistence and use cases."""

from gestao_demandas.demandas.models import (
    Complexidade,
    Demanda,
    DemandaFilters,
    DemandaPage,
    DemandaStatistics,
    PageRequest,
    Prioridade,
    RestoreResult,
    SortField,
    SortSpec,
    StatusDemanda,
)
from gestao_demandas.demandas.store import DemandaStore
from gestao_demandas.demandas.validation import DemandaValidationError, validate_demanda

__all__ = [
    "Complexidade",
    "Demanda",
    "DemandaFilters",
    "DemandaPage",
    "DemandaStatistics",
    "DemandaStore",
    "DemandaValidationError",
    "PageRequest",
    "Prioridade",
    "RestoreResult",
    "SortField",
    "SortSpec",
    "StatusDemanda",
    "validate_demanda",
]
