"""Abstract document store interface for persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod


class DocumentStore(ABC):
    """Reads and writes whole documents by absolute path.

    ``write`` must be all-or-nothing: either the new content is stored in
    full or the previous content is left untouched.
    """

    @abstractmethod
    async def read(self, path: str) -> str: ...

    @abstractmethod
    async def write(self, path: str, content: str) -> None: ...

