"""FastAPI application factory for the read-only status API.

Usage::

    from kubemirror.api.app import create_app

    app = create_app(store=store, descriptor=descriptor)

The factory is used by both the production bootstrap (``kubemirror.app``)
and unit tests.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from kubemirror.api.routes import health_router, router
from kubemirror.api.schemas import ErrorResponse
from kubemirror.cache.store import Store
from kubemirror.models.resources import ResourceDescriptor

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(store: Store, descriptor: ResourceDescriptor) -> FastAPI:
    """Create the status API over *store*.

    Args:
        store:      Reflector store to read from; never written by the API.
        descriptor: Resource type mirrored by the store.
    """
    from kubemirror import __version__

    app = FastAPI(
        title="kubemirror",
        summary="Read-only view of a mirrored Kubernetes resource type",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
    )

    app.state.store = store
    app.state.resource = str(descriptor)

    app.include_router(health_router)
    app.include_router(router, prefix=_API_PREFIX)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="INTERNAL_ERROR", detail="An unexpected error occurred.").model_dump(),
        )

    return app
