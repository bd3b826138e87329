"""Dependency injection for FastAPI: session manager singleton and dev-mode gate."""

from __future__ import annotations

from fastapi import Depends, Request

from docedit.preview.backend import PreviewBackend
from docedit.service.session_manager import EditSessionManager
from docedit.settings import Settings
from docedit.storage.gateway import PersistenceGateway

_session_manager: EditSessionManager | None = None
_disable_session_list: bool = False

EDITOR_DISABLED_MESSAGE = "Editor only available in development"


class EditorDisabledError(Exception):
    """Raised by the dev-mode gate; rendered as HTTP 403."""


def init_session_manager(
    manager: EditSessionManager, *, disable_session_list: bool = False
) -> None:
    """Set the global EditSessionManager (called at app startup)."""
    global _session_manager, _disable_session_list  # noqa: PLW0603
    _session_manager = manager
    _disable_session_list = disable_session_list


def get_session_manager() -> EditSessionManager:
    """FastAPI ``Depends`` provider for EditSessionManager."""
    if _session_manager is None:
        raise RuntimeError("EditSessionManager not initialised, call init_session_manager() first")
    return _session_manager


def is_session_list_disabled() -> bool:
    """Return True when the GET /sessions endpoint is suppressed."""
    return _disable_session_list


def reset_session_manager() -> None:
    """Clear the global EditSessionManager (for tests)."""
    global _session_manager, _disable_session_list  # noqa: PLW0603
    _session_manager = None
    _disable_session_list = False


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_gateway(request: Request) -> PersistenceGateway:
    gateway: PersistenceGateway = request.app.state.gateway
    return gateway


def get_preview_backend(request: Request) -> PreviewBackend | None:
    backend: PreviewBackend | None = request.app.state.preview_backend
    return backend


def require_dev_mode(settings: Settings = Depends(get_settings)) -> None:  # noqa: B008
    """Refuse every editing operation unless ``dev_mode`` is enabled."""
    if not settings.dev_mode:
        raise EditorDisabledError(EDITOR_DISABLED_MESSAGE)
