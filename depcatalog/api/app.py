"""FastAPI application factory for depcatalog.

Usage::

    from depcatalog.api.app import create_app

    app = create_app(graph_service=graph_service, config=config)

The factory is used by the production bootstrap (``depcatalog.app``) and
by tests, which pass a mocked GraphService.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from depcatalog.api.routes import router
from depcatalog.api.schemas import ErrorResponse

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(graph_service: Any, config: Any = None) -> FastAPI:
    """Create and configure the depcatalog FastAPI application.

    Args:
        graph_service: GraphService instance shared by all requests.
        config:        DepCatalogConfig, kept on app.state for handlers.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from depcatalog import __version__

    app = FastAPI(
        title="depcatalog",
        summary="Service dependency catalog API",
        version=__version__,
        description="Dependency graphs of catalogued services with health rollups.",
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.graph_service = graph_service
    app.state.config = config

    app.include_router(router, prefix=_API_PREFIX)
    app.mount("/metrics", make_asgi_app())

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors to our error envelope."""
        errors = exc.errors()
        first_msg = str(errors[0].get("msg", "")) if errors else ""
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_QUERY", detail=first_msg).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions (store failures included); never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
