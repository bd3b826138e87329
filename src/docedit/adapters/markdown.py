"""Plain Markdown adapter.

Renders the preview only and validates with the CommonMark grammar, so
braces and capitalised tags are not treated as MDX fragments.
"""

from __future__ import annotations

from docedit.adapters.base import EditorAdapter, preview_pane
from docedit.adapters.registry import AdapterRegistry
from docedit.models.errors import Validate
from docedit.models.session import RenderedView, SessionSnapshot
from docedit.parser.validator import ContentValidator


@AdapterRegistry.register
class MarkdownAdapter(EditorAdapter):
    def __init__(self) -> None:
        self._validator = ContentValidator(mdx=False)

    @property
    def id(self) -> str:
        return "markdown"

    @property
    def name(self) -> str:
        return "Markdown preview"

    def render(self, snapshot: SessionSnapshot) -> RenderedView:
        return self._view(snapshot, preview_pane(snapshot))

    def validator(self) -> Validate | None:
        return self._validator.validate
