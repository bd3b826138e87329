"""Path validation: only existing, absolute documents with an allowed extension."""

from __future__ import annotations

import os
from collections.abc import Iterable
from enum import StrEnum
from pathlib import Path

from docedit.models.document import DEFAULT_EXTENSIONS, ResourceHandle


class PathErrorKind(StrEnum):
    NOT_ABSOLUTE = "not_absolute"
    UNSUPPORTED_EXTENSION = "unsupported_extension"
    NOT_FOUND = "not_found"


class PathError(Exception):
    """Raised when a path is not eligible for reading or writing."""

    def __init__(self, kind: PathErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class PathGuard:
    """Validates resource paths.  Stateless and safe to share."""

    def validate(
        self, path: str, allowed_extensions: Iterable[str] = DEFAULT_EXTENSIONS
    ) -> ResourceHandle:
        """Return a :class:`ResourceHandle` for *path* or raise :class:`PathError`.

        Creation is not supported, so the document must already exist.
        """
        if not path or not os.path.isabs(path):
            raise PathError(PathErrorKind.NOT_ABSOLUTE, "Path must be absolute")

        allowed = frozenset(ext.lower() for ext in allowed_extensions)
        if not any(path.lower().endswith(ext) for ext in allowed):
            raise PathError(
                PathErrorKind.UNSUPPORTED_EXTENSION,
                f"File must have extension: {', '.join(sorted(allowed))}",
            )

        target = Path(path)
        if not target.exists():
            raise PathError(PathErrorKind.NOT_FOUND, "File does not exist")
        if target.is_dir():
            raise PathError(PathErrorKind.NOT_FOUND, "Path refers to a directory, not a file")

        return ResourceHandle(path=path, allowed_extensions=allowed)
