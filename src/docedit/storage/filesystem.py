"""Filesystem-backed document store with atomic replace-on-write."""

from __future__ import annotations

import asyncio
import contextlib
import os
import shutil
import tempfile
from pathlib import Path

from docedit.storage.repository import DocumentStore


class FileSystemStore(DocumentStore):
    """Reads and writes UTF-8 documents on the local filesystem.

    Writes go to a temporary sibling file which is flushed, fsynced and
    then moved over the target with :func:`os.replace`, so readers see
    either the old or the new content, never a partial write.
    """

    encoding = "utf-8"

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self._read, path)

    async def write(self, path: str, content: str) -> None:
        await asyncio.to_thread(self._write, path, content)

    def _read(self, path: str) -> str:
        # newline="" keeps CRLF files byte-identical on the way back out
        with open(path, encoding=self.encoding, newline="") as handle:
            return handle.read()

    def _write(self, path: str, content: str) -> None:
        target = Path(path)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            if target.exists():
                shutil.copymode(target, tmp_name)
            os.replace(tmp_name, target)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise
