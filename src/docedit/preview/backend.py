"""Preview backends: turn document source into HTML plus front matter."""

from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from markdown_it import MarkdownIt

from docedit.parser.frontmatter import FrontmatterError, FrontmatterParser

PREVIEW_UNAVAILABLE = "Preview unavailable: no preview compiler is installed"


class CompilationError(Exception):
    """Raised when a preview cannot be compiled.  Advisory only."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CompilerUnavailableError(CompilationError):
    """Raised when the preview compiler itself is missing."""

    def __init__(self, message: str = PREVIEW_UNAVAILABLE) -> None:
        super().__init__(message)


@dataclass
class CompiledPreview:
    """Rendered body and parsed front matter of one compilation."""

    body: str
    frontmatter: dict[str, Any] = field(default_factory=dict)


class PreviewBackend(ABC):
    """Compiles source text into a renderable preview."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def compile(
        self, source: str, components: Mapping[str, str] | None = None
    ) -> CompiledPreview:
        """Compile *source*.  Raises :class:`CompilationError` on failure."""


class MarkdownPreviewBackend(PreviewBackend):
    """CommonMark preview via markdown-it-py.

    *components* maps MDX component names to the HTML element they are
    rendered as, e.g. ``{"Callout": "aside"}``.  Unmapped components pass
    through as raw HTML.
    """

    def __init__(self) -> None:
        self._md = MarkdownIt("commonmark", {"html": True})
        self._frontmatter = FrontmatterParser()

    @property
    def name(self) -> str:
        return "markdown-it"

    async def compile(
        self, source: str, components: Mapping[str, str] | None = None
    ) -> CompiledPreview:
        return await asyncio.to_thread(self._compile, source, dict(components or {}))

    def _compile(self, source: str, components: dict[str, str]) -> CompiledPreview:
        try:
            document = self._frontmatter.parse(source)
        except FrontmatterError as exc:
            where = f" (line {exc.line})" if exc.line else ""
            raise CompilationError(f"{exc.message}{where}") from None
        body = _substitute_components(document.body, components)
        return CompiledPreview(body=self._md.render(body), frontmatter=document.frontmatter)


def _substitute_components(body: str, components: dict[str, str]) -> str:
    for name, tag in components.items():
        escaped = re.escape(name)
        body = re.sub(rf"<{escaped}(?=[\s/>])", f'<{tag} data-component="{name}"', body)
        body = re.sub(rf"</{escaped}\s*>", f"</{tag}>", body)
    return body


def create_backend(enabled: bool = True) -> PreviewBackend | None:
    """Resolve the preview backend once at startup; ``None`` means unavailable."""
    return MarkdownPreviewBackend() if enabled else None
