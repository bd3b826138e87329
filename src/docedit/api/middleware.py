"""Middleware: request timing and body size limits."""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from docedit.parser.frontmatter import MAX_DOCUMENT_SIZE

# Routes that carry whole documents get the document limit (5M chars is at
# most 4 bytes per char in UTF-8; 20 MB leaves room for JSON escaping).
_MAX_BODY_DOCUMENT = 4 * MAX_DOCUMENT_SIZE
_MAX_BODY_DEFAULT = 1 * 1024 * 1024  # 1 MB for everything else


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Add X-Request-Duration header with processing time."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        return response


class RequestBodyLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies that exceed size limits.

    The configured edit endpoint, its preview route and session content
    updates allow bodies large enough for the biggest accepted document;
    all other endpoints are capped at 1 MB.

    Two checks are performed:
    1. **Content-Length header**: cheap early rejection.
    2. **Streaming byte count**: reads the body via ``request.stream()``
       and aborts as soon as the limit is exceeded, avoiding buffering an
       arbitrarily large payload into memory.  The consumed bytes are
       cached on ``request._body`` so downstream handlers can still use
       ``await request.body()``.
    """

    def __init__(self, app: ASGIApp, edit_endpoint: str = "/api/__docedit/edit") -> None:
        super().__init__(app)
        endpoint = edit_endpoint.rstrip("/")
        self._document_paths = frozenset({endpoint, f"{endpoint}/preview"})

    def _limit_for(self, path: str) -> int:
        path = path.rstrip("/")
        if path in self._document_paths:
            return _MAX_BODY_DOCUMENT
        if path.startswith("/sessions/") and path.endswith("/content"):
            return _MAX_BODY_DOCUMENT
        return _MAX_BODY_DEFAULT

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        limit = self._limit_for(request.url.path)
        limit_mb = limit // (1024 * 1024)

        # Fast path: check Content-Length header first
        content_length = request.headers.get("content-length")
        if content_length is not None and content_length.isdigit() and int(content_length) > limit:
            return _too_large(limit_mb)

        # Stream actual bytes, abort early if limit exceeded
        if request.method in ("POST", "PUT", "PATCH"):
            chunks: list[bytes] = []
            total = 0
            async for chunk in request.stream():
                total += len(chunk)
                if total > limit:
                    return _too_large(limit_mb)
                chunks.append(chunk)
            # Cache consumed body so downstream can call request.body()
            request._body = b"".join(chunks)  # noqa: SLF001

        return await call_next(request)


def _too_large(limit_mb: int) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"detail": f"Request body too large (max {limit_mb} MB)"},
    )
