"""
FastAPI application main module.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

import importacoes.logging  # noqa: F401  Ensure logging is configured
from backoffice_api.config.settings import settings
from backoffice_api.controllers.health_controller import router as health_router
from backoffice_api.controllers.importacao_controller import router as importacao_router
from backoffice_api.middleware import (
    APITokenMiddleware,
    add_metrics_endpoint,
    add_observability_middleware,
)
from backoffice_api.models.responses import ErrorResponse
from backoffice_api.utils.error_utils import error_response
from importacoes.console import ImportacaoConsole
from importacoes.exceptions import BaseImportacaoException


def create_app(console: Optional[ImportacaoConsole] = None) -> FastAPI:
    """Create the FastAPI application; a prebuilt console is used as-is."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Console session lifespan; the poller starts on the first list fetch."""
        logger.info("Starting Backoffice Importacoes API...")
        app.state.console = console or ImportacaoConsole()
        app.state.console.start_live_updates()
        logger.info("Backoffice Importacoes API started successfully")

        yield

        logger.info("Shutting down Backoffice Importacoes API...")
        await app.state.console.close()
        app.state.console = None
        logger.info("Backoffice Importacoes API shutdown complete")

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Add API token middleware first (before observability)
    app.add_middleware(APITokenMiddleware)
    logger.info("API token authentication middleware enabled")

    add_observability_middleware(app)
    add_metrics_endpoint(app)
    logger.info("Observability middleware and metrics endpoint enabled")

    if settings.is_production():
        app.add_middleware(
            TrustedHostMiddleware, allowed_hosts=settings.get_allowed_hosts()
        )
        logger.info(
            f"Production security middleware enabled: trusted hosts {settings.get_allowed_hosts()}"
        )

    app.include_router(importacao_router)
    app.include_router(health_router)

    @app.exception_handler(BaseImportacaoException)
    async def console_exception_handler(
        request: Request, exc: BaseImportacaoException
    ):
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
        return error_response(exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception in {request.url.path}: {exc}")
        error = ErrorResponse(
            error="InternalServerError", message="An unexpected error occurred"
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error.model_dump(mode="json"),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backoffice_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info",
    )
