"""Pydantic domain models for docedit."""

from docedit.models.document import DEFAULT_EXTENSIONS, EditMetadata, ResourceHandle
from docedit.models.errors import ValidationIssue, ValidationResult
from docedit.models.session import (
    AdapterDescriptor,
    CompilationRequest,
    EditSession,
    PreviewResult,
    PreviewStatus,
    RenderedView,
    SessionSnapshot,
    SessionStatus,
)

__all__ = [
    "DEFAULT_EXTENSIONS",
    "AdapterDescriptor",
    "CompilationRequest",
    "EditMetadata",
    "EditSession",
    "PreviewResult",
    "PreviewStatus",
    "RenderedView",
    "ResourceHandle",
    "SessionSnapshot",
    "SessionStatus",
    "ValidationIssue",
    "ValidationResult",
]
