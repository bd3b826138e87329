"""Structured validation results with source position tracking."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict


class ValidationIssue(BaseModel):
    """A single problem found in a document, positioned when the parser can."""

    model_config = ConfigDict(frozen=True)

    line: int | None = None
    column: int | None = None
    message: str


class ValidationResult(BaseModel):
    """Result of validating document content.

    A fresh instance is produced on every validation call.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: tuple[ValidationIssue, ...] = ()

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def failure(
        cls, message: str, *, line: int | None = None, column: int | None = None
    ) -> ValidationResult:
        return cls(valid=False, errors=(ValidationIssue(line=line, column=column, message=message),))


Validate = Callable[[str], Awaitable[ValidationResult]]
