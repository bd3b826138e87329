"""Abstract editor adapter with shared HTML rendering helpers."""

from __future__ import annotations

import html
from abc import ABC, abstractmethod

from docedit.models.errors import Validate
from docedit.models.session import PreviewStatus, RenderedView, SessionSnapshot


class EditorAdapter(ABC):
    """Pluggable rendering surface for an edit session.

    The session controller only ever calls this contract.  Adapters that
    want their own validation return it from :meth:`validator`; otherwise
    the default content validator is used.
    """

    @property
    @abstractmethod
    def id(self) -> str: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def render(self, snapshot: SessionSnapshot) -> RenderedView:
        """Render the session snapshot."""

    def validator(self) -> Validate | None:
        """Return a custom validation coroutine, or ``None`` for the default."""
        return None

    # -- helpers for subclasses ---------------------------------------------

    def _view(self, snapshot: SessionSnapshot, *parts: str) -> RenderedView:
        body = "".join((_status_banner(snapshot), *parts))
        return RenderedView(
            adapter_id=self.id,
            html=f'<div class="docedit docedit-{self.id}">{body}</div>',
            status=snapshot.status,
        )


def source_pane(snapshot: SessionSnapshot) -> str:
    return (
        f'<textarea class="docedit-source" data-path="{html.escape(snapshot.path or "")}">'
        f"{html.escape(snapshot.content)}</textarea>"
    )


def preview_pane(snapshot: SessionSnapshot) -> str:
    preview = snapshot.preview
    if preview is None:
        return '<div class="docedit-preview docedit-preview-pending">Compiling...</div>'
    if preview.status is PreviewStatus.ERROR:
        return (
            '<div class="docedit-preview docedit-preview-error">'
            f"<pre>{html.escape(preview.message or 'Compilation failed')}</pre></div>"
        )
    parts = ['<div class="docedit-preview">']
    if preview.frontmatter:
        rows = "".join(
            f"<dt>{html.escape(str(key))}</dt><dd>{html.escape(str(value))}</dd>"
            for key, value in preview.frontmatter.items()
        )
        parts.append(f'<dl class="docedit-frontmatter">{rows}</dl>')
    parts.append(preview.rendered or "")
    parts.append("</div>")
    return "".join(parts)


def _status_banner(snapshot: SessionSnapshot) -> str:
    dirty = " docedit-dirty" if snapshot.dirty else ""
    banner = f'<div class="docedit-status docedit-{snapshot.status.value}{dirty}">'
    if snapshot.last_error:
        banner += f'<p class="docedit-error">{html.escape(snapshot.last_error)}</p>'
    if snapshot.last_validation is not None and not snapshot.last_validation.valid:
        items = []
        for issue in snapshot.last_validation.errors:
            where = f"{issue.line}:{issue.column or 1} " if issue.line else ""
            items.append(f"<li>{html.escape(where + issue.message)}</li>")
        banner += f'<ul class="docedit-validation">{"".join(items)}</ul>'
    return banner + "</div>"
