"""
FastAPI middleware for automatic observability.
Captures HTTP metrics and tags logs with the importacao being addressed.
"""

import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from importacoes.logging import clear_importacao_id, set_importacao_id
from importacoes.observability import get_metrics_endpoint, record_http_request

_COLLECTION_SEGMENTS = {
    "refresh",
    "analises",
    "poller",
    "notificacoes",
    "tempo-real",
}


def importacao_id_from_path(path: str) -> Optional[str]:
    """Return the job id for ``/importacoes/{id}[/...]`` paths, else None."""
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) >= 2 and segments[0] == "importacoes":
        if segments[1] not in _COLLECTION_SEGMENTS:
            return segments[1]
    return None


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware to automatically capture HTTP metrics and logs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        method = request.method

        set_importacao_id(importacao_id_from_path(request.url.path))
        try:
            response = await call_next(request)
        finally:
            clear_importacao_id()

        duration = time.time() - start_time

        # Label by route template so job ids do not explode cardinality
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)

        record_http_request(
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
            duration=duration,
        )

        return response


def add_observability_middleware(app: FastAPI) -> None:
    """Add observability middleware to FastAPI app."""
    app.add_middleware(ObservabilityMiddleware)


def add_metrics_endpoint(app: FastAPI) -> None:
    """Add metrics endpoint for Prometheus scraping."""

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        content, content_type = get_metrics_endpoint()
        return Response(content=content, media_type=content_type)
