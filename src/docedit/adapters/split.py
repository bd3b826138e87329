"""Split adapter: source on the left, live preview on the right."""

from __future__ import annotations

from docedit.adapters.base import EditorAdapter, preview_pane, source_pane
from docedit.adapters.registry import AdapterRegistry
from docedit.models.session import RenderedView, SessionSnapshot


@AdapterRegistry.register
class SplitAdapter(EditorAdapter):
    @property
    def id(self) -> str:
        return "split"

    @property
    def name(self) -> str:
        return "Split view with live preview"

    def render(self, snapshot: SessionSnapshot) -> RenderedView:
        return self._view(
            snapshot,
            '<div class="docedit-split">',
            source_pane(snapshot),
            preview_pane(snapshot),
            "</div>",
        )
