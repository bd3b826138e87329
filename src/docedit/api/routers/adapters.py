"""Adapter listing endpoint: GET /adapters."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from docedit.adapters.registry import AdapterRegistry
from docedit.api.deps import get_settings
from docedit.api.schemas import AdapterListResponse
from docedit.settings import Settings

router = APIRouter()


@router.get("", response_model=AdapterListResponse)
async def list_adapters(
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> AdapterListResponse:
    """List all registered editor adapters and the configured default."""
    return AdapterListResponse(adapters=AdapterRegistry.describe(), default=settings.editor_adapter)
