"""API request/response Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from docedit.models.errors import ValidationResult
from docedit.models.session import AdapterDescriptor, PreviewResult, SessionSnapshot, SessionStatus

# ---------------------------------------------------------------------------
# Edit boundary schemas
# ---------------------------------------------------------------------------


class ReadResponse(BaseModel):
    """Response for GET {endpoint}: ``content`` on success, ``error`` otherwise."""

    content: str | None = None
    error: str | None = None


class SaveRequest(BaseModel):
    """Request body for POST {endpoint}."""

    path: str = Field(description="Absolute path to the document")
    content: str = Field(description="New document content")


class SaveResponse(BaseModel):
    """Response body for POST {endpoint}."""

    success: bool
    error: str | None = None
    validation: ValidationResult | None = None


class PreviewRequest(BaseModel):
    """Request body for POST {endpoint}/preview."""

    source: str
    components: dict[str, str] = Field(
        default_factory=dict, description="Component name -> HTML element to render it as"
    )


class PreviewResponse(BaseModel):
    """Response body for POST {endpoint}/preview."""

    body: str
    frontmatter: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""
    dev_mode: bool = False


class AdapterListResponse(BaseModel):
    """Response for GET /adapters."""

    adapters: list[AdapterDescriptor] = []
    default: str


# ---------------------------------------------------------------------------
# Session schemas
# ---------------------------------------------------------------------------


class SessionCreateRequest(BaseModel):
    """Request body for POST /sessions."""

    path: str = Field(description="Absolute path of the document to edit")
    adapter: str | None = Field(default=None, description="Editor adapter id")
    metadata: dict[str, str] = Field(default_factory=dict)


class SessionResponse(BaseModel):
    """Single session info plus its current snapshot."""

    session_id: str
    created_at: datetime
    last_accessed_at: datetime
    adapter: str
    status: SessionStatus
    path: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    session: SessionSnapshot | None = None


class SessionListResponse(BaseModel):
    """Response for GET /sessions."""

    sessions: list[SessionResponse]


class EditRequest(BaseModel):
    """Request body for PUT /sessions/{session_id}/content."""

    content: str


class CommandResponse(BaseModel):
    """Outcome of a state-machine command on a session."""

    accepted: bool
    session: SessionSnapshot


class SessionPreviewResponse(BaseModel):
    """Latest accepted preview of a session."""

    generation: int = 0
    enabled: bool = True
    preview: PreviewResult | None = None
