"""Live preview compilation for docedit."""

from docedit.preview.backend import (
    CompilationError,
    CompiledPreview,
    CompilerUnavailableError,
    MarkdownPreviewBackend,
    PreviewBackend,
    create_backend,
)
from docedit.preview.compiler import PreviewCompiler

__all__ = [
    "CompilationError",
    "CompiledPreview",
    "CompilerUnavailableError",
    "MarkdownPreviewBackend",
    "PreviewBackend",
    "PreviewCompiler",
    "create_backend",
]
