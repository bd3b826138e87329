"""Plain source adapter: the raw document in a text area."""

from __future__ import annotations

from docedit.adapters.base import EditorAdapter, source_pane
from docedit.adapters.registry import AdapterRegistry
from docedit.models.session import RenderedView, SessionSnapshot


@AdapterRegistry.register
class SourceAdapter(EditorAdapter):
    @property
    def id(self) -> str:
        return "source"

    @property
    def name(self) -> str:
        return "Source editor"

    def render(self, snapshot: SessionSnapshot) -> RenderedView:
        return self._view(snapshot, source_pane(snapshot))
