"""Demanda endpoint response models."""

from pydantic import BaseModel

from gestao_demandas.demandas.models import Demanda, DemandaStatistics


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class DemandaListResponse(BaseModel):
    """One page of records."""

    success: bool = True
    data: list[Demanda]
    pagination: Pagination


class DemandaResponse(BaseModel):
    """A single created or updated record."""

    success: bool = True
    demanda: Demanda


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Demanda excluída com sucesso"


class SearchResponse(BaseModel):
    success: bool = True
    data: list[Demanda]


class StatisticsResponse(BaseModel):
    success: bool = True
    estatisticas: DemandaStatistics
