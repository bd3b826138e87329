"""FastAPI application factory for the docedit editing server."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docedit import __version__
from docedit.adapters import AdapterRegistry
from docedit.api.deps import (
    EditorDisabledError,
    init_session_manager,
    reset_session_manager,
)
from docedit.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from docedit.api.routers import adapters, edit, sessions
from docedit.api.schemas import HealthResponse
from docedit.preview.backend import PreviewBackend, create_backend
from docedit.service.session_controller import EditSessionController
from docedit.service.session_manager import EditSessionManager
from docedit.settings import Settings
from docedit.storage.gateway import PersistenceGateway


def create_session_manager(
    settings: Settings,
    gateway: PersistenceGateway,
    preview_backend: PreviewBackend | None,
) -> EditSessionManager:
    """Build an EditSessionManager whose controllers share *gateway* and *preview_backend*."""

    def build_controller(adapter_id: str | None) -> EditSessionController:
        adapter = AdapterRegistry.get(adapter_id or settings.editor_adapter)
        return EditSessionController(
            gateway,
            adapter,
            preview_backend=preview_backend,
            debounce_seconds=settings.preview_debounce_ms / 1000,
        )

    return EditSessionManager(
        build_controller,
        ttl_seconds=settings.session_ttl_seconds,
        cleanup_interval=settings.session_cleanup_interval,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Start/stop the EditSessionManager alongside the application."""
    settings: Settings = app.state.settings
    mgr = create_session_manager(settings, app.state.gateway, app.state.preview_backend)
    mgr.start()
    init_session_manager(mgr, disable_session_list=settings.disable_session_list)
    try:
        yield
    finally:
        await mgr.stop()
        reset_session_manager()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    # Fail at startup, not on the first session, if the adapter is unknown.
    AdapterRegistry.get(settings.editor_adapter)

    app = FastAPI(
        title="docedit",
        description="Edit Markdown/MDX documents in place with validation and live preview.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gateway = PersistenceGateway(allowed_extensions=settings.extensions)
    app.state.preview_backend = create_backend(settings.preview_enabled)

    # Middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestBodyLimitMiddleware, edit_endpoint=settings.edit_endpoint)

    @app.exception_handler(EditorDisabledError)
    async def editor_disabled(_request: Request, exc: EditorDisabledError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"success": False, "error": str(exc)})

    # Read/write boundary and session-scoped endpoints (dev mode only)
    app.include_router(edit.router, prefix=settings.edit_endpoint, tags=["edit"])
    app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])

    app.include_router(adapters.router, prefix="/adapters", tags=["adapters"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__, dev_mode=settings.dev_mode)

    return app


def main() -> None:
    """Run the editing server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("docedit.api")
    logger.info(
        "docedit server v%s starting (host=%s, port=%d, dev_mode=%s)",
        __version__, settings.api_server_host, settings.effective_port, settings.dev_mode,
    )
    if not settings.dev_mode:
        logger.warning("DEV_MODE is off: all editing endpoints will answer 403")

    uvicorn.run(
        "docedit.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
