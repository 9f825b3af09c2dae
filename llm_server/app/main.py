# app/main.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — FastAPI application entrypoint
-------------------------------------------------------
This file wires everything together:

- Sets up central logging.
- Builds the session registry (storage backend + Workers AI engine).
- Creates the FastAPI app.
- Adds middleware (CORS outside production).
- Mounts routes:
    * GET  /          → the chat box page (app/web/index.html)
    * POST /chat      → one chat turn for a session
    * GET  /history   → stored transcript for a session
    * GET  /health    → liveness + config summary
- Answers every other path/method with 404 "Not Found".
- Exposes an ASGI `app` object for uvicorn.

Typical run command (dev, from llm_server/):

    uvicorn app.main:app --host 0.0.0.0 --port 8000 --reload

"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, settings as default_settings
from app.providers.workers_ai import WorkersAIEngine
from app.routers.chat import router as chat_router
from app.runtime_state import SessionRegistry, build_storage_backend
from app.utils import get_logger, read_text_or, setup_logging

setup_logging(debug=default_settings.debug)
logger = get_logger(__name__)

FALLBACK_PAGE = "<!doctype html><meta charset=\"utf-8\"/><title>Chat</title><p>Chat page unavailable.</p>"


def build_registry(settings: Settings) -> SessionRegistry:
    """Registry wired from settings: storage backend + Workers AI engine."""
    return SessionRegistry(
        storage=build_storage_backend(settings.storage_backend, settings.sessions_dir),
        engine=WorkersAIEngine.from_settings(settings),
    )


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[SessionRegistry] = None,
) -> FastAPI:
    """
    Application factory.

    Tests pass their own `registry` (fake engine, memory storage) and
    `settings`; production uses the module-level settings.
    """
    settings = settings or default_settings
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        # No /docs, /redoc or /openapi.json: every path outside the routes
        # below answers 404.
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.registry = registry if registry is not None else build_registry(settings)

    # ------------------------------------------------------------------
    # CORS: the page is served from the same origin, so this only matters
    # for local frontends during development.
    # ------------------------------------------------------------------
    if settings.environment != "production":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # ------------------------------------------------------------------
    # Unknown path or wrong method → plain 404, never 405.
    # ------------------------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    app.include_router(chat_router)

    # ------------------------------------------------------------------
    # Page + meta endpoints
    # ------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse, tags=["page"])
    async def index():
        """The chat box page."""
        return HTMLResponse(read_text_or(settings.web_dir / "index.html", FALLBACK_PAGE))

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Lightweight health check for monitoring scripts."""
        return {
            "status": "ok",
            "environment": settings.environment,
            "debug": settings.debug,
            "storage_backend": settings.storage_backend,
            "inference_configured": settings.inference_configured,
        }

    logger.info(
        "FastAPI app created (env=%s, storage=%s, inference_configured=%s)",
        settings.environment,
        settings.storage_backend,
        settings.inference_configured,
    )
    return app


# ASGI app for uvicorn / gunicorn
app = create_app()


if __name__ == "__main__":
    """
    Allow `python3 -m app.main` during development.

    In production you normally use:

        uvicorn app.main:app --host 0.0.0.0 --port 8000
    """
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=(default_settings.environment != "production"),
    )
