"""HTTP client of the read/write boundary, usable wherever a DocumentGateway is."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from docedit.models.document import ResourceHandle
from docedit.models.errors import Validate, ValidationResult
from docedit.storage.gateway import (
    DocumentGateway,
    InvalidContentError,
    LoadedDocument,
    ReadError,
    TransportError,
    WriteError,
)

logger = logging.getLogger("docedit.client")

_DEFAULT_ENDPOINT = "/api/__docedit/edit"


class RemoteGateway(DocumentGateway):
    """Loads and saves documents through a running docedit server.

    Connection failures and unexpected HTTP statuses raise
    :class:`TransportError`.  A ``400`` reply carries the server's message as
    :class:`ReadError` / :class:`WriteError`, or :class:`InvalidContentError`
    when the reply includes a validation result.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        endpoint: str = _DEFAULT_ENDPOINT,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def __aenter__(self) -> RemoteGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    async def load(self, handle: ResourceHandle) -> LoadedDocument:
        resp = await self._request("GET", params={"path": handle.path})
        payload = _json(resp)
        if resp.status_code == 200 and isinstance(payload.get("content"), str):
            return LoadedDocument(content=payload["content"])
        if resp.status_code == 400:
            raise ReadError(payload.get("error") or "Failed to read file")
        raise _unexpected(resp, payload)

    async def save(
        self, handle: ResourceHandle, content: str, validate: Validate | None = None
    ) -> None:
        """Write *content* remotely.

        *validate* runs locally first; rejected content never leaves the
        process.  The server still applies its own validation.
        """
        if validate is not None:
            validation = await validate(content)
            if not validation.valid:
                raise InvalidContentError(validation)

        resp = await self._request("POST", json={"path": handle.path, "content": content})
        payload = _json(resp)
        if resp.status_code == 200 and payload.get("success"):
            return
        if resp.status_code == 400:
            if payload.get("validation"):
                raise InvalidContentError(ValidationResult.model_validate(payload["validation"]))
            raise WriteError(payload.get("error") or "Failed to write file")
        raise _unexpected(resp, payload)

    async def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, self._endpoint, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, self._endpoint, exc)
            raise TransportError(str(exc) or type(exc).__name__) from exc


def _json(resp: httpx.Response) -> dict[str, Any]:
    try:
        payload = resp.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _unexpected(resp: httpx.Response, payload: dict[str, Any]) -> TransportError:
    detail = payload.get("error") or payload.get("detail") or resp.text
    return TransportError(f"HTTP {resp.status_code}: {detail}")
