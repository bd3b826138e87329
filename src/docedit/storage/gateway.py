"""Persistence gateway: path + content validation in front of a document store."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from docedit.models.document import DEFAULT_EXTENSIONS, ResourceHandle
from docedit.models.errors import Validate, ValidationResult
from docedit.parser.validator import ContentValidator
from docedit.storage.filesystem import FileSystemStore
from docedit.storage.path_guard import PathGuard
from docedit.storage.repository import DocumentStore

logger = logging.getLogger("docedit.storage")


class PersistenceError(Exception):
    """I/O failure while reading or writing a document."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ReadError(PersistenceError):
    """Raised when a document cannot be read."""


class WriteError(PersistenceError):
    """Raised when a document cannot be written.  Prior content is untouched."""


class TransportError(Exception):
    """Raised when a remote editing endpoint cannot be reached."""


class InvalidContentError(Exception):
    """Raised when content fails validation; nothing is written."""

    def __init__(self, validation: ValidationResult) -> None:
        first = validation.errors[0].message if validation.errors else "Invalid document content"
        super().__init__(first)
        self.validation = validation


@dataclass
class LoadedDocument:
    """Content read from the store."""

    content: str


class DocumentGateway(ABC):
    """Loads and saves whole documents identified by a resource handle."""

    @abstractmethod
    async def load(self, handle: ResourceHandle) -> LoadedDocument: ...

    @abstractmethod
    async def save(
        self, handle: ResourceHandle, content: str, validate: Validate | None = None
    ) -> None: ...


class PersistenceGateway(DocumentGateway):
    """Loads and saves documents after delegating to PathGuard and a validator.

    Stateless with respect to sessions; safe to share across them.
    """

    def __init__(
        self,
        store: DocumentStore | None = None,
        *,
        guard: PathGuard | None = None,
        validator: ContentValidator | None = None,
        allowed_extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self._store = store if store is not None else FileSystemStore()
        self._guard = guard if guard is not None else PathGuard()
        self._validator = validator if validator is not None else ContentValidator()
        self._extensions = frozenset(allowed_extensions)

    def resolve(self, path: str) -> ResourceHandle:
        """Validate a raw path against the configured extensions."""
        return self._guard.validate(path, self._extensions)

    async def load(self, handle: ResourceHandle) -> LoadedDocument:
        """Read a document.  Raises ``PathError`` or :class:`ReadError`."""
        self._guard.validate(handle.path, handle.allowed_extensions)
        try:
            content = await self._store.read(handle.path)
        except (OSError, UnicodeError) as exc:
            logger.warning("Failed to read %s: %s", handle.path, exc)
            raise ReadError(f"Failed to read file: {exc}") from exc
        return LoadedDocument(content=content)

    async def save(
        self, handle: ResourceHandle, content: str, validate: Validate | None = None
    ) -> None:
        """Validate and atomically write *content*.

        *validate* overrides the default :class:`ContentValidator`.  Raises
        ``PathError`` unchanged, :class:`InvalidContentError` or
        :class:`WriteError`.
        """
        self._guard.validate(handle.path, handle.allowed_extensions)

        validation = await (validate or self._validator.validate)(content)
        if not validation.valid:
            raise InvalidContentError(validation)

        try:
            await self._store.write(handle.path, content)
        except (OSError, UnicodeError) as exc:
            logger.warning("Failed to write %s: %s", handle.path, exc)
            raise WriteError(f"Failed to write file: {exc}") from exc
        logger.info("Saved %s (%d chars)", handle.path, len(content))
