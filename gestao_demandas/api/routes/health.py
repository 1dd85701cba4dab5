"""Health check and metrics endpoints."""

import resource
import time

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from gestao_demandas.api.dependencies import DemandaStoreDep, SettingsDep
from gestao_demandas.api.models.health import HealthResponse
from gestao_demandas.db.errors import StoreError
from gestao_demandas.observability.logging import get_logger
from gestao_demandas.utils.dates import utc_now

logger = get_logger(__name__)

router = APIRouter()
metrics_router = APIRouter()


def _memory_usage() -> dict[str, int]:
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return {"maxRssKb": usage.ru_maxrss}


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    store: DemandaStoreDep,
    settings: SettingsDep,
) -> HealthResponse | JSONResponse:
    """Report liveness, record count and storage integrity.

    Returns 500 with status "ERROR" when the store cannot be queried.
    """
    logger.debug("health_check_request")

    started_at = getattr(request.app.state, "started_at", time.monotonic())
    try:
        total = await store.count()
        integrity = await store.integrity_check()
    except StoreError as e:
        logger.error("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "status": "ERROR",
                "error": str(e),
                "timestamp": utc_now().isoformat(),
            },
        )

    return HealthResponse(
        demandas=total,
        integrity=integrity,
        uptime=round(time.monotonic() - started_at, 3),
        timestamp=utc_now(),
        memory=_memory_usage(),
        version=settings.version,
    )


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Get Prometheus metrics.

    Returns:
        Prometheus metrics as text/plain
    """
    logger.debug("metrics_request")

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
