"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, route registration and the lifespan that starts the
snapshot scheduler and takes the final snapshot on graceful shutdown.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gestao_demandas.api.dependencies import (
    get_audit_recorder,
    get_demanda_store,
    get_settings,
    get_snapshot_manager,
    get_snapshot_scheduler,
    reset_dependencies,
)
from gestao_demandas.api.exceptions import DemandasAPIError, from_domain_error
from gestao_demandas.api.middleware.context import RequestContextMiddleware
from gestao_demandas.api.models.errors import ErrorCode, ErrorResponse
from gestao_demandas.api.routes import register_routes
from gestao_demandas.backup.errors import BackupError
from gestao_demandas.backup.models import SnapshotKind
from gestao_demandas.db.errors import StoreError
from gestao_demandas.demandas.validation import DemandaValidationError
from gestao_demandas.observability.error_log import append_error
from gestao_demandas.observability.logging import get_logger, setup_logging
from gestao_demandas.observability.metrics import ERRORS

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start background jobs on startup; drain and snapshot on shutdown.

    A process killed with SIGTERM exits without running the shutdown half
    (see ``gestao_demandas.server``), so no final snapshot is taken then.
    """
    settings = get_settings()
    app.state.started_at = time.monotonic()

    store = await get_demanda_store()
    manager = await get_snapshot_manager()
    recorder = await get_audit_recorder()
    scheduler = await get_snapshot_scheduler()
    if settings.backup.scheduler_enabled:
        await scheduler.start()

    logger.info("app_started", demandas=await store.count(), env=settings.env)
    try:
        yield
    finally:
        logger.info("app_stopping")
        await scheduler.stop()
        await recorder.drain()
        await manager.drain()
        if settings.backup.final_snapshot_on_shutdown:
            await manager.snapshot_safely(SnapshotKind.SHUTDOWN)
        await reset_dependencies()
        logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - CORS middleware
    - Request context middleware
    - Global exception handlers
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact_pii=logging_config.redact_pii,
    )

    app = FastAPI(
        title="Gestão de Demandas API",
        description="CRUD, audit trail and JSON snapshots for work items",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.started_at = time.monotonic()

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request context middleware
    app.add_middleware(RequestContextMiddleware)

    # Register exception handlers
    _register_exception_handlers(app)

    # Register routes
    register_routes(app, metrics_enabled=settings.observability.metrics_enabled)

    logger.info(
        "app_created",
        app=settings.app_name,
        debug=settings.debug,
        cors_origins=settings.api.cors_origins,
    )

    return app


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.to_content())


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(DemandasAPIError)
    async def api_error_handler(request: Request, exc: DemandasAPIError) -> JSONResponse:
        """Handle DemandasAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(
            exc.status_code,
            ErrorResponse(
                error=exc.message,
                code=exc.error_code,
                errors=exc.errors,
                message=exc.message if exc.errors else None,
            ),
        )

    @app.exception_handler(DemandaValidationError)
    @app.exception_handler(BackupError)
    @app.exception_handler(StoreError)
    async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Translate service-layer errors into API errors."""
        settings = get_settings()
        api_error = from_domain_error(exc, expose_details=not settings.is_production)
        if api_error.status_code >= 500:
            ERRORS.labels(error_type=type(exc).__name__).inc()
        return await api_error_handler(request, api_error)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle FastAPI request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )
        errors = [
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorResponse(
                error="Requisição inválida",
                code=ErrorCode.INVALID_REQUEST,
                errors=errors,
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Envelope framework-level HTTP errors, unmatched routes included."""
        if exc.status_code == 404:
            body = ErrorResponse(
                error="Rota não encontrada",
                code=ErrorCode.ROUTE_NOT_FOUND,
                path=request.url.path,
                method=request.method,
            )
        elif exc.status_code == 405:
            body = ErrorResponse(
                error="Método não permitido",
                code=ErrorCode.METHOD_NOT_ALLOWED,
                path=request.url.path,
                method=request.method,
            )
        else:
            body = ErrorResponse(error=str(exc.detail), code=ErrorCode.INVALID_REQUEST)
        return JSONResponse(
            status_code=exc.status_code,
            content=body.to_content(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions and append them to the error log."""
        settings = get_settings()
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        ERRORS.labels(error_type=type(exc).__name__).inc()
        await run_in_threadpool(append_error, settings.observability.error_log_path, exc)

        return _error_response(
            500,
            ErrorResponse(
                error="Erro interno do servidor",
                code=ErrorCode.INTERNAL_ERROR,
                message="Erro interno" if settings.is_production else str(exc),
            ),
        )

    logger.debug("exception_handlers_registered")
