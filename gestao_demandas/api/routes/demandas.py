"""Demanda endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Query, Request

from gestao_demandas.api.dependencies import DemandaServiceDep, SettingsDep
from gestao_demandas.api.exceptions import InvalidRequestError
from gestao_demandas.api.models.demandas import (
    DeleteResponse,
    DemandaListResponse,
    DemandaResponse,
    Pagination,
    SearchResponse,
    StatisticsResponse,
)
from gestao_demandas.demandas.models import DemandaFilters, PageRequest, SortSpec
from gestao_demandas.observability.logging import get_logger
from gestao_demandas.utils.dates import parse_range_bound

logger = get_logger(__name__)

MAX_PERIODO_DAYS = 36500

router = APIRouter(prefix="/demandas")


def _actor_id(value: Any) -> int | None:
    """Best-effort integer user ID for the audit trail."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _origin(request: Request) -> str | None:
    return request.client.host if request.client else None


def _build_filters(
    status: str | None,
    funcionario_id: int | None,
    categoria: str | None,
    prioridade: str | None,
    data_inicio: str | None,
    data_fim: str | None,
) -> DemandaFilters:
    try:
        start = parse_range_bound(data_inicio)
        end = parse_range_bound(data_fim, end_of_day=True)
    except ValueError as e:
        raise InvalidRequestError(f"Data de filtro inválida: {e}") from e
    return DemandaFilters(
        status=status or None,
        funcionario_id=funcionario_id,
        categoria=categoria or None,
        prioridade=prioridade or None,
        data_inicio=start,
        data_fim=end,
    )


@router.get("", response_model=DemandaListResponse)
async def list_demandas(
    service: DemandaServiceDep,
    settings: SettingsDep,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    status: str | None = Query(default=None),
    funcionario_id: int | None = Query(default=None, alias="funcionarioId"),
    categoria: str | None = Query(default=None),
    prioridade: str | None = Query(default=None),
    data_inicio: str | None = Query(default=None, alias="dataInicio"),
    data_fim: str | None = Query(default=None, alias="dataFim"),
    order_by: str | None = Query(default=None, alias="orderBy"),
    order_direction: str | None = Query(default=None, alias="orderDirection"),
) -> DemandaListResponse:
    """List demandas with filters, sorting and pagination.

    Unknown ``orderBy`` values fall back to creation date; any
    ``orderDirection`` other than ASC sorts descending.
    """
    page_size = min(limit or settings.api.default_page_size, settings.api.max_page_size)
    filters = _build_filters(status, funcionario_id, categoria, prioridade, data_inicio, data_fim)
    sort = SortSpec.parse(order_by, order_direction)

    logger.debug(
        "list_demandas_request",
        page=page,
        limit=page_size,
        order_by=sort.field.value,
        ascending=sort.ascending,
    )

    result = await service.list_demandas(filters, sort, PageRequest(page=page, limit=page_size))
    return DemandaListResponse(
        data=result.items,
        pagination=Pagination(
            page=result.page, limit=result.limit, total=result.total, pages=result.pages
        ),
    )


@router.post("", response_model=DemandaResponse)
async def create_demanda(
    request: Request,
    service: DemandaServiceDep,
    payload: dict[str, Any] = Body(...),
) -> DemandaResponse:
    """Create a demanda.

    The tag, timestamps, creator and default status are filled in by the
    server.
    """
    actor = _actor_id(payload.get("usuarioId", payload.get("funcionarioId")))
    demanda = await service.create_demanda(payload, actor_id=actor, origin=_origin(request))
    return DemandaResponse(demanda=demanda)


@router.get("/estatisticas", response_model=StatisticsResponse)
async def get_statistics(
    service: DemandaServiceDep,
    periodo: int = Query(default=30, ge=1, le=MAX_PERIODO_DAYS, description="Window in days"),
) -> StatisticsResponse:
    """Aggregate counts over demandas created in the last ``periodo`` days."""
    return StatisticsResponse(estatisticas=await service.statistics(periodo))


@router.get("/search", response_model=SearchResponse)
async def search_demandas(
    service: DemandaServiceDep,
    settings: SettingsDep,
    q: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
) -> SearchResponse:
    """Substring search; title matches first, then description, then tag."""
    size = min(limit or settings.api.default_search_limit, settings.api.max_page_size)
    return SearchResponse(data=await service.search(q, size))


@router.put("/{demanda_id}", response_model=DemandaResponse)
async def update_demanda(
    demanda_id: int,
    request: Request,
    service: DemandaServiceDep,
    payload: dict[str, Any] = Body(...),
) -> DemandaResponse:
    """Merge the given fields into an existing demanda."""
    actor = _actor_id(payload.get("usuarioId", payload.get("funcionarioId")))
    demanda = await service.update_demanda(
        demanda_id, payload, actor_id=actor, origin=_origin(request)
    )
    return DemandaResponse(demanda=demanda)


@router.delete("/{demanda_id}", response_model=DeleteResponse)
async def delete_demanda(
    demanda_id: int,
    request: Request,
    service: DemandaServiceDep,
    usuario_id: str | None = Query(default=None, alias="usuarioId"),
    payload: dict[str, Any] | None = Body(default=None),
) -> DeleteResponse:
    """Delete a demanda; a snapshot is taken first.

    The acting user is read from ``usuarioId`` in the JSON body, or from the
    query string for clients that send DELETE without a body.
    """
    actor = _actor_id((payload or {}).get("usuarioId", usuario_id))
    await service.delete_demanda(demanda_id, actor_id=actor, origin=_origin(request))
    return DeleteResponse()
