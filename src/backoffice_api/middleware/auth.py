"""
API Token authentication middleware.
"""

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from backoffice_api.config.settings import settings

API_TOKEN_HEADER = "X-API-Token"


class APITokenMiddleware(BaseHTTPMiddleware):
    """Validate the API token on every request except health, docs and metrics."""

    EXCLUDED_PATHS = {"/health", "/docs", "/redoc", "/openapi.json", "/metrics"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        if not settings.api_token:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "error": "ServiceUnavailable",
                    "message": "API token is not configured",
                },
            )

        token = request.headers.get(API_TOKEN_HEADER)
        if not token or token != settings.api_token:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={
                    "error": "Unauthorized",
                    "message": "Invalid or missing API token",
                },
            )

        return await call_next(request)
