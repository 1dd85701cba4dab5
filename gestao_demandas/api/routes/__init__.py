"""API route registration.

This module provides helper functions for registering API routers
with the FastAPI application.
"""

from fastapi import APIRouter, FastAPI

from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)


def create_api_router() -> APIRouter:
    """Create the /api router with all resource routes.

    Returns:
        APIRouter with demanda and backup routes registered
    """
    router = APIRouter(prefix="/api")

    from gestao_demandas.api.routes.backups import router as backups_router
    from gestao_demandas.api.routes.demandas import router as demandas_router

    router.include_router(demandas_router, tags=["Demandas"])
    router.include_router(backups_router, tags=["Backups"])

    logger.debug("api_router_created", routes=["demandas", "backups"])

    return router


def register_routes(app: FastAPI, *, metrics_enabled: bool = True) -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
        metrics_enabled: Expose the Prometheus /metrics endpoint
    """
    app.include_router(create_api_router())

    # Health and metrics at root level
    from gestao_demandas.api.routes.health import metrics_router
    from gestao_demandas.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])
    if metrics_enabled:
        app.include_router(metrics_router, tags=["Health"])

    logger.info("routes_registered")
