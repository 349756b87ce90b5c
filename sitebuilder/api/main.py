"""
Sitebuilder FastAPI application.

Entry point for the editing API: `uvicorn sitebuilder.api.main:app`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sitebuilder.api.routes import sessions as session_routes
from sitebuilder.api.sessions import SessionRegistry
from sitebuilder.config import settings
from sitebuilder.kernel.errors import (
    DocumentParseError,
    DuplicateElementId,
    ElementNotPermitted,
    PageNotFound,
)
from sitebuilder.kernel.storage import MemoryStorage, SiteStorage

logger = logging.getLogger(__name__)


def _error(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info("api: %s %s -> %d (%s)", request.method, request.url.path, status_code, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def create_app(storage: SiteStorage | None = None) -> FastAPI:
    """Build the app with its own session registry and storage backend."""
    docs_url = "/docs" if settings.ENVIRONMENT == "development" else None
    app = FastAPI(title="Sitebuilder", docs_url=docs_url, redoc_url=None)
    app.state.sessions = SessionRegistry(settings.MAX_SESSIONS)
    app.state.storage = storage or MemoryStorage()

    app.add_exception_handler(ElementNotPermitted, _error(403))
    app.add_exception_handler(DuplicateElementId, _error(409))
    app.add_exception_handler(DocumentParseError, _error(422))
    app.add_exception_handler(PageNotFound, _error(404))

    app.include_router(session_routes.router)

    @app.get("/health")
    async def health():
        """Health check endpoint for uptime monitoring."""
        return {"status": "ok", "sessions": len(app.state.sessions)}

    return app


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
