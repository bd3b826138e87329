"""Edit-session state, preview compilation requests/results and adapter views."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docedit.models.document import ResourceHandle
from docedit.models.errors import ValidationResult


class SessionStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    ERROR = "error"


class PreviewStatus(StrEnum):
    READY = "ready"
    ERROR = "error"


class CompilationRequest(BaseModel):
    """A content snapshot tagged with the generation it was submitted under."""

    model_config = ConfigDict(frozen=True)

    content_snapshot: str
    generation: int


class PreviewResult(BaseModel):
    """Outcome of one preview compilation."""

    model_config = ConfigDict(frozen=True)

    status: PreviewStatus
    generation: int
    rendered: str | None = None
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    message: str | None = None


@dataclass
class EditSession:
    """Mutable state of one open document, owned by a single controller."""

    status: SessionStatus = SessionStatus.IDLE
    handle: ResourceHandle | None = None
    content: str = ""
    dirty: bool = False
    loaded: bool = False
    last_error: str | None = None
    last_validation: ValidationResult | None = None
    preview: PreviewResult | None = None


class SessionSnapshot(BaseModel):
    """Immutable copy of an :class:`EditSession` for adapters and transport."""

    model_config = ConfigDict(frozen=True)

    status: SessionStatus
    path: str | None = None
    content: str = ""
    dirty: bool = False
    last_error: str | None = None
    last_validation: ValidationResult | None = None
    preview: PreviewResult | None = None

    @classmethod
    def of(cls, session: EditSession) -> SessionSnapshot:
        return cls(
            status=session.status,
            path=session.handle.path if session.handle else None,
            content=session.content,
            dirty=session.dirty,
            last_error=session.last_error,
            last_validation=session.last_validation,
            preview=session.preview,
        )


class RenderedView(BaseModel):
    """What an editor adapter produces for a session snapshot."""

    adapter_id: str
    html: str
    status: SessionStatus


class AdapterDescriptor(BaseModel):
    """Public description of a registered editor adapter."""

    id: str
    name: str
    has_validate: bool = False
