"""Document identity: validated resource handles and injected edit metadata."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EXTENSIONS: frozenset[str] = frozenset({".md", ".mdx"})


class ResourceHandle(BaseModel):
    """Absolute path to an existing document plus the extensions it may carry.

    Instances are produced by :class:`docedit.storage.path_guard.PathGuard`;
    the path is always absolute and never a directory.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    allowed_extensions: frozenset[str] = DEFAULT_EXTENSIONS


class EditMetadata(BaseModel):
    """Edit metadata attached to a page descriptor before the editor sees it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    resource_handle: ResourceHandle = Field(alias="resourceHandle")
    endpoint: str
    enabled: bool = True
