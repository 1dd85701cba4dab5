"""Request context middleware for observability."""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from gestao_demandas.observability.logging import get_logger
from gestao_demandas.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY

logger = get_logger(__name__)


def _route_label(request: Request) -> str:
    """Route template for metrics, so IDs do not explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request ID to the log context and records request metrics.

    The ID is taken from the X-Request-ID header when present and echoed
    back on the response.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and bind context."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.debug(
            "request_started",
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            REQUEST_COUNT.labels(
                method=request.method, route=_route_label(request), status="500"
            ).inc()
            raise
        elapsed = time.perf_counter() - start

        route = _route_label(request)
        REQUEST_COUNT.labels(
            method=request.method, route=route, status=str(response.status_code)
        ).inc()
        REQUEST_LATENCY.labels(method=request.method, route=route).observe(elapsed)

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response
