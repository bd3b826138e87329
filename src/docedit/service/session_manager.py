"""Session management: TTL-scoped edit-session controllers for HTTP clients."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from docedit.models.session import SessionStatus
from docedit.service.session_controller import EditSessionController

logger = logging.getLogger("docedit.session")

ControllerFactory = Callable[[str | None], EditSessionController]


class SessionNotFoundError(KeyError):
    """Raised when a session ID is not found or has expired."""


@dataclass
class SessionInfo:
    """Public session metadata (returned by list/get)."""

    session_id: str
    created_at: datetime
    last_accessed_at: datetime
    adapter: str
    status: SessionStatus
    path: str | None
    metadata: dict[str, str]


@dataclass
class _Session:
    """Internal session state."""

    session_id: str
    controller: EditSessionController
    last_accessed: float  # monotonic clock for TTL checks
    metadata: dict[str, str] = field(default_factory=dict)
    # Wall-clock times for reporting
    created_at_wall: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_accessed_wall: datetime = field(default_factory=lambda: datetime.now(UTC))


class EditSessionManager:
    """Manages TTL-scoped sessions, each holding its own controller.

    Lives on the event loop and is not thread-safe.  Call :meth:`start` to
    begin the background cleanup task and :meth:`stop` to cancel it.
    Expired sessions are closed, which cancels their preview work.
    """

    def __init__(
        self,
        controller_factory: ControllerFactory,
        ttl_seconds: int = 1800,
        cleanup_interval: float = 60,
    ) -> None:
        self._factory = controller_factory
        self._ttl = ttl_seconds
        self._cleanup_interval = cleanup_interval
        self._sessions: dict[str, _Session] = {}
        self._cleanup_task: asyncio.Task[None] | None = None

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Start the background cleanup task on the running loop."""
        if self._cleanup_task is not None:
            return
        self._cleanup_task = asyncio.get_running_loop().create_task(
            self._cleanup_loop(), name="session-cleanup"
        )

    async def stop(self) -> None:
        """Cancel the cleanup task and close every session."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._cleanup_task
            self._cleanup_task = None
        for session in self._sessions.values():
            session.controller.close()
        self._sessions.clear()

    # -- public API ----------------------------------------------------------

    def create_session(
        self, adapter_id: str | None = None, metadata: dict[str, str] | None = None
    ) -> SessionInfo:
        """Create a new idle session.  Raises ``UnknownAdapterError``."""
        controller = self._factory(adapter_id)
        session = _Session(
            session_id=secrets.token_hex(16),  # 32-char hex (128-bit)
            controller=controller,
            last_accessed=time.monotonic(),
            metadata=metadata or {},
        )
        self._sessions[session.session_id] = session
        return self._session_info(session)

    def get_controller(self, session_id: str) -> EditSessionController:
        """Get a session's controller, updating its last-accessed time.

        Raises :class:`SessionNotFoundError` if the session is missing or expired.
        """
        return self._touch(session_id).controller

    def get_session(self, session_id: str) -> SessionInfo:
        """Get session info (also refreshes last-accessed)."""
        return self._session_info(self._touch(session_id))

    def close_session(self, session_id: str) -> None:
        """Explicitly close a session."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"Session '{session_id}' not found")
        session.controller.close()

    def list_sessions(self) -> list[SessionInfo]:
        """Return info for all non-expired sessions."""
        now_mono = time.monotonic()
        return [
            self._session_info(s)
            for s in self._sessions.values()
            if now_mono - s.last_accessed <= self._ttl
        ]

    @property
    def active_count(self) -> int:
        """Number of active (non-expired) sessions."""
        now_mono = time.monotonic()
        return sum(1 for s in self._sessions.values() if now_mono - s.last_accessed <= self._ttl)

    # -- internal ------------------------------------------------------------

    def _touch(self, session_id: str) -> _Session:
        now_mono = time.monotonic()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session '{session_id}' not found")
        # Lazy expiration check
        if now_mono - session.last_accessed > self._ttl:
            del self._sessions[session_id]
            session.controller.close()
            raise SessionNotFoundError(f"Session '{session_id}' has expired")
        session.last_accessed = now_mono
        session.last_accessed_wall = datetime.now(UTC)
        return session

    @staticmethod
    def _session_info(session: _Session) -> SessionInfo:
        snapshot = session.controller.snapshot()
        return SessionInfo(
            session_id=session.session_id,
            created_at=session.created_at_wall,
            last_accessed_at=session.last_accessed_wall,
            adapter=session.controller.adapter.id,
            status=snapshot.status,
            path=snapshot.path,
            metadata=session.metadata,
        )

    def _purge_expired(self) -> None:
        """Close and remove all expired sessions (called by the cleanup task)."""
        now_mono = time.monotonic()
        expired = [
            sid for sid, s in self._sessions.items() if now_mono - s.last_accessed > self._ttl
        ]
        for sid in expired:
            self._sessions.pop(sid).controller.close()
        if expired:
            logger.info("Expired %d edit session(s)", len(expired))

    async def _cleanup_loop(self) -> None:
        """Background loop that periodically purges expired sessions."""
        while True:
            await asyncio.sleep(self._cleanup_interval)
            self._purge_expired()
