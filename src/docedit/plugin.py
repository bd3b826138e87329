"""Page-loading hook that attaches edit metadata to document descriptors.

Page descriptors are plain mappings as produced by a site's content loader::

    {"format": "page", "absolute_path": "/site/docs/index.mdx", "data": {...}}

Each page with an absolute path receives an :class:`EditMetadata` under
``data["_edit"]``.  Nothing is touched when editing is disabled.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, MutableMapping
from typing import Any

from docedit.models.document import EditMetadata, ResourceHandle
from docedit.settings import Settings

EDIT_KEY = "_edit"


def attach_edit_metadata(
    pages: Iterable[MutableMapping[str, Any]],
    settings: Settings | None = None,
    *,
    enabled: bool | None = None,
    endpoint: str | None = None,
) -> int:
    """Attach ``_edit`` metadata to every page file; returns how many were tagged.

    *enabled* and *endpoint* default to ``settings.dev_mode`` and
    ``settings.edit_endpoint``.  Paths are not checked against the disk
    here; the gateway validates them on every load and save.
    """
    if settings is None:
        settings = Settings()
    if enabled is None:
        enabled = settings.dev_mode
    if not enabled:
        return 0
    endpoint = endpoint or settings.edit_endpoint

    tagged = 0
    for page in pages:
        path = page.get("absolute_path")
        if page.get("format") != "page" or not path or not os.path.isabs(path):
            continue
        data = page.setdefault("data", {})
        data[EDIT_KEY] = EditMetadata(
            resource_handle=ResourceHandle(path=path, allowed_extensions=settings.extensions),
            endpoint=endpoint,
            enabled=True,
        )
        tagged += 1
    return tagged
