"""Session-scoped endpoints driving an edit-session controller over HTTP."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from docedit.adapters.registry import UnknownAdapterError
from docedit.api.deps import (
    get_gateway,
    get_session_manager,
    get_settings,
    is_session_list_disabled,
    require_dev_mode,
)
from docedit.api.schemas import (
    CommandResponse,
    EditRequest,
    SessionCreateRequest,
    SessionListResponse,
    SessionPreviewResponse,
    SessionResponse,
)
from docedit.models.document import EditMetadata
from docedit.service.session_controller import EditSessionController
from docedit.service.session_manager import EditSessionManager, SessionInfo, SessionNotFoundError
from docedit.settings import Settings
from docedit.storage.gateway import PersistenceGateway
from docedit.storage.path_guard import PathError

router = APIRouter(dependencies=[Depends(require_dev_mode)])


# -- helpers -----------------------------------------------------------------


def _get_controller(session_id: str, mgr: EditSessionManager) -> EditSessionController:
    """Resolve session_id to its controller, raise 404 if missing/expired."""
    try:
        return mgr.get_controller(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found") from None


def _session_response(
    info: SessionInfo, controller: EditSessionController | None = None
) -> SessionResponse:
    """Convert a SessionInfo dataclass to a Pydantic response."""
    d = asdict(info)
    if controller is not None:
        d["session"] = controller.snapshot()
    return SessionResponse(**d)


def _command_response(accepted: bool, controller: EditSessionController) -> CommandResponse:
    return CommandResponse(accepted=accepted, session=controller.snapshot())


# -- session CRUD ------------------------------------------------------------


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    body: SessionCreateRequest,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> SessionResponse:
    """Open a document in a new edit session.

    A load failure still creates the session, in the ``error`` state.
    """
    try:
        handle = gateway.resolve(body.path)
    except PathError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from None
    try:
        info = mgr.create_session(adapter_id=body.adapter, metadata=body.metadata)
    except UnknownAdapterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None

    controller = mgr.get_controller(info.session_id)
    await controller.open(
        EditMetadata(resource_handle=handle, endpoint=settings.edit_endpoint, enabled=True)
    )
    return _session_response(mgr.get_session(info.session_id), controller)


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> SessionListResponse:
    """List all active sessions."""
    if is_session_list_disabled():
        raise HTTPException(status_code=403, detail="Session listing is disabled")
    sessions = mgr.list_sessions()
    return SessionListResponse(sessions=[_session_response(s) for s in sessions])


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> SessionResponse:
    """Get info and the current snapshot of a session."""
    try:
        info = mgr.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found") from None
    return _session_response(info, mgr.get_controller(session_id))


@router.delete("/{session_id}", status_code=204)
async def close_session(
    session_id: str,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> None:
    """Close a session, discarding unsaved edits."""
    try:
        mgr.close_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found") from None


# -- state-machine commands --------------------------------------------------


@router.put("/{session_id}/content", response_model=CommandResponse)
async def edit_content(
    session_id: str,
    body: EditRequest,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> CommandResponse:
    """Replace the session content (schedules a preview compile)."""
    controller = _get_controller(session_id, mgr)
    accepted = controller.edit(body.content)
    if not accepted:
        raise HTTPException(
            status_code=409, detail=f"Cannot edit while session is {controller.status}"
        )
    return _command_response(accepted, controller)


@router.post("/{session_id}/save", response_model=CommandResponse)
async def save_session(
    session_id: str,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> CommandResponse:
    """Request a save.  ``accepted`` is false when nothing was written."""
    controller = _get_controller(session_id, mgr)
    accepted = await controller.request_save()
    return _command_response(accepted, controller)


@router.post("/{session_id}/dismiss", response_model=CommandResponse)
async def dismiss_error(
    session_id: str,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> CommandResponse:
    """Leave the error state, keeping the current content."""
    controller = _get_controller(session_id, mgr)
    accepted = await controller.dismiss_error()
    return _command_response(accepted, controller)


# -- preview & rendering -----------------------------------------------------


@router.get("/{session_id}/preview", response_model=SessionPreviewResponse)
async def session_preview(
    session_id: str,
    wait: bool = False,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> SessionPreviewResponse:
    """Latest preview of a session; ``wait`` flushes the debounce first."""
    controller = _get_controller(session_id, mgr)
    compiler = controller.compiler
    if compiler is None:
        return SessionPreviewResponse()
    if wait:
        await controller.drain_preview()
    return SessionPreviewResponse(
        generation=compiler.generation,
        enabled=compiler.enabled,
        preview=controller.snapshot().preview,
    )


@router.get("/{session_id}/view", response_class=HTMLResponse)
async def session_view(
    session_id: str,
    mgr: EditSessionManager = Depends(get_session_manager),  # noqa: B008
) -> HTMLResponse:
    """Render the session through its editor adapter."""
    controller = _get_controller(session_id, mgr)
    return HTMLResponse(controller.render().html)
