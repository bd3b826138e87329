"""Read/write/preview boundary: GET and POST {endpoint}, POST {endpoint}/preview."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from docedit.api.deps import get_gateway, get_preview_backend, require_dev_mode
from docedit.api.schemas import (
    PreviewRequest,
    PreviewResponse,
    ReadResponse,
    SaveRequest,
    SaveResponse,
)
from docedit.preview.backend import CompilationError, CompilerUnavailableError, PreviewBackend
from docedit.service.session_controller import INVALID_CONTENT_MESSAGE
from docedit.storage.gateway import (
    InvalidContentError,
    PersistenceError,
    PersistenceGateway,
)
from docedit.storage.path_guard import PathError

PREVIEW_NOT_INSTALLED = "Preview compiler not installed"

router = APIRouter(dependencies=[Depends(require_dev_mode)])


@router.get("", response_model=ReadResponse, response_model_exclude_none=True)
async def read_document(
    response: Response,
    path: str | None = None,
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> ReadResponse:
    """Return the current content of the document at ``path``."""
    if not path:
        response.status_code = 400
        return ReadResponse(error="Missing path parameter")
    try:
        document = await gateway.load(gateway.resolve(path))
    except (PathError, PersistenceError) as exc:
        response.status_code = 400
        return ReadResponse(error=str(exc))
    return ReadResponse(content=document.content)


@router.post("", response_model=SaveResponse, response_model_exclude_none=True)
async def save_document(
    body: SaveRequest,
    response: Response,
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> SaveResponse:
    """Validate and atomically write a document."""
    try:
        handle = gateway.resolve(body.path)
        await gateway.save(handle, body.content)
    except InvalidContentError as exc:
        response.status_code = 400
        return SaveResponse(success=False, error=INVALID_CONTENT_MESSAGE, validation=exc.validation)
    except (PathError, PersistenceError) as exc:
        response.status_code = 400
        return SaveResponse(success=False, error=str(exc))
    return SaveResponse(success=True)


@router.post("/preview", response_model=PreviewResponse)
async def compile_preview(
    body: PreviewRequest,
    backend: PreviewBackend | None = Depends(get_preview_backend),  # noqa: B008
) -> PreviewResponse | JSONResponse:
    """Compile a source snapshot into HTML plus front matter."""
    if backend is None:
        return _error(503, PREVIEW_NOT_INSTALLED)
    try:
        compiled = await backend.compile(body.source, body.components)
    except CompilerUnavailableError:
        return _error(503, PREVIEW_NOT_INSTALLED)
    except CompilationError as exc:
        return _error(422, exc.message)
    return PreviewResponse(body=compiled.body, frontmatter=compiled.frontmatter)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
