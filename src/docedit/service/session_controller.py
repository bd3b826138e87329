"""Edit-session lifecycle controller.

One controller owns one :class:`EditSession` at a time and moves it through
``idle -> loading -> ready <-> saving`` (any state may fall into ``error``)
in response to explicit commands.  Loading and saving go through a
:class:`DocumentGateway`; every edit is forwarded to a per-session
:class:`PreviewCompiler` without blocking.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from docedit.adapters.base import EditorAdapter
from docedit.models.document import EditMetadata
from docedit.models.session import (
    EditSession,
    PreviewResult,
    RenderedView,
    SessionSnapshot,
    SessionStatus,
)
from docedit.preview.backend import PreviewBackend
from docedit.preview.compiler import DEFAULT_DEBOUNCE_SECONDS, PreviewCompiler
from docedit.storage.gateway import (
    DocumentGateway,
    InvalidContentError,
    PersistenceError,
    TransportError,
)
from docedit.storage.path_guard import PathError

logger = logging.getLogger("docedit.session")

TRANSPORT_ERROR_MESSAGE = "Editor endpoint unavailable, please try again"
INVALID_CONTENT_MESSAGE = "Invalid document content"

_FAILURES = (PathError, PersistenceError, InvalidContentError, TransportError)

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OpenSession:
    metadata: EditMetadata


@dataclass(frozen=True)
class Edit:
    content: str


@dataclass(frozen=True)
class RequestSave:
    pass


@dataclass(frozen=True)
class DismissError:
    pass


@dataclass(frozen=True)
class CloseSession:
    pass


Command = OpenSession | Edit | RequestSave | DismissError | CloseSession

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatusChanged:
    status: SessionStatus
    previous: SessionStatus


@dataclass(frozen=True)
class ResourceChanged:
    """Published after a successful save so hosts can reload the document."""

    path: str


@dataclass(frozen=True)
class PreviewUpdated:
    result: PreviewResult


SessionEvent = StatusChanged | ResourceChanged | PreviewUpdated
Listener = Callable[[SessionEvent], None]


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class EditSessionController:
    """Owns one document's edit session and its preview pipeline.

    State-machine events that await I/O (``open``, ``request_save``,
    ``dismiss_error``) are serialized by an ``asyncio.Lock``.  ``edit`` and
    ``close`` never wait, so typing and closing stay responsive while a save
    is in flight.  Failures never escape: they are recorded on the session.
    """

    def __init__(
        self,
        gateway: DocumentGateway,
        adapter: EditorAdapter,
        *,
        preview_backend: PreviewBackend | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        components: Mapping[str, str] | None = None,
    ) -> None:
        self._gateway = gateway
        self._adapter = adapter
        self._backend = preview_backend
        self._debounce = debounce_seconds
        self._components = dict(components or {})
        self._session = EditSession()
        self._compiler: PreviewCompiler | None = None
        self._lock = asyncio.Lock()
        self._listeners: list[Listener] = []

    # -- introspection -------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def content(self) -> str:
        return self._session.content

    @property
    def adapter(self) -> EditorAdapter:
        return self._adapter

    @property
    def compiler(self) -> PreviewCompiler | None:
        """The preview compiler of the open session, if any."""
        return self._compiler

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot.of(self._session)

    def render(self) -> RenderedView:
        """Render the current session through the bound adapter."""
        return self._adapter.render(self.snapshot())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for session events; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # -- command channel -----------------------------------------------------

    async def dispatch(self, command: Command) -> bool:
        """Route a command to its operation.  Returns whether it was accepted."""
        if isinstance(command, OpenSession):
            return await self.open(command.metadata)
        if isinstance(command, Edit):
            return self.edit(command.content)
        if isinstance(command, RequestSave):
            return await self.request_save()
        if isinstance(command, DismissError):
            return await self.dismiss_error()
        if isinstance(command, CloseSession):
            self.close()
            return True
        raise TypeError(f"Unknown command: {command!r}")

    # -- operations ----------------------------------------------------------

    async def open(self, metadata: EditMetadata) -> bool:
        """Load the document described by *metadata* into a new session."""
        async with self._lock:
            if self._session.status is not SessionStatus.IDLE:
                logger.warning("open ignored: session is %s", self._session.status)
                return False
            if not metadata.enabled:
                logger.info("open ignored: editing disabled for %s", metadata.resource_handle.path)
                return False

            session = EditSession(handle=metadata.resource_handle)
            self._session = session
            self._compiler = PreviewCompiler(
                self._backend,
                debounce_seconds=self._debounce,
                on_result=self._preview_sink(session),
                components=self._components,
            )
            self._transition(session, SessionStatus.LOADING)

            try:
                document = await self._gateway.load(metadata.resource_handle)
            except _FAILURES as exc:
                if self._session is session:
                    self._fail(session, exc)
                return False
            except Exception as exc:
                logger.exception("Unexpected error while loading %s", metadata.resource_handle.path)
                if self._session is session:
                    self._fail(session, exc)
                return False

            if self._session is not session:
                return False  # closed while loading
            session.content = document.content
            session.loaded = True
            session.dirty = False
            self._transition(session, SessionStatus.READY)
            self._compiler.submit(session.content)
            return True

    def edit(self, content: str) -> bool:
        """Replace the session content and schedule a preview compile."""
        session = self._session
        if session.status not in (SessionStatus.READY, SessionStatus.SAVING):
            logger.debug("edit ignored: session is %s", session.status)
            return False
        session.content = content
        session.dirty = True
        if self._compiler is not None:
            self._compiler.submit(content)
        return True

    async def request_save(self) -> bool:
        """Validate and write the current content.  Single-flight."""
        session = self._session
        if session.status is SessionStatus.SAVING:
            logger.debug("save rejected: a save is already in flight")
            return False

        async with self._lock:
            if (
                self._session is not session
                or session.status is not SessionStatus.READY
                or not session.dirty
                or session.handle is None
            ):
                return False

            saved = session.content
            self._transition(session, SessionStatus.SAVING)
            try:
                await self._gateway.save(session.handle, saved, self._adapter.validator())
            except _FAILURES as exc:
                if self._session is session:
                    self._fail(session, exc)
                return False
            except Exception as exc:
                logger.exception("Unexpected error while saving %s", session.handle.path)
                if self._session is session:
                    self._fail(session, exc)
                return False

            if self._session is not session:
                return False  # closed while saving
            # Edits typed during the save keep the session dirty.
            session.dirty = session.content != saved
            session.last_error = None
            session.last_validation = None
            self._transition(session, SessionStatus.READY)
            self._emit(ResourceChanged(path=session.handle.path))
            return True

    async def dismiss_error(self) -> bool:
        """Return from ``error`` to ``ready`` without retrying anything."""
        async with self._lock:
            session = self._session
            if session.status is not SessionStatus.ERROR:
                return False
            if not session.loaded:
                # Nothing was ever loaded; saving an empty buffer would clobber the file.
                logger.info("dismiss ignored: document never loaded, close the session instead")
                return False
            session.last_error = None
            session.last_validation = None
            self._transition(session, SessionStatus.READY)
            return True

    def close(self) -> None:
        """Discard the session and invalidate any preview work for it."""
        previous = self._session
        if self._compiler is not None:
            self._compiler.cancel()
            self._compiler = None
        self._session = EditSession()
        if previous.status is not SessionStatus.IDLE:
            self._emit(StatusChanged(status=SessionStatus.IDLE, previous=previous.status))

    async def drain_preview(self) -> PreviewResult | None:
        """Finish pending preview work and return the latest result."""
        if self._compiler is None:
            return None
        await self._compiler.drain()
        return self._session.preview

    # -- internal ------------------------------------------------------------

    def _preview_sink(self, session: EditSession) -> Callable[[PreviewResult], None]:
        def accept(result: PreviewResult) -> None:
            if self._session is not session or self._compiler is None:
                return
            if result.generation != self._compiler.generation:
                return
            session.preview = result
            self._emit(PreviewUpdated(result=result))

        return accept

    def _fail(self, session: EditSession, exc: Exception) -> None:
        if isinstance(exc, TransportError):
            logger.warning("Editor endpoint unavailable: %s", exc)
            session.last_error = TRANSPORT_ERROR_MESSAGE
        elif isinstance(exc, InvalidContentError):
            session.last_error = INVALID_CONTENT_MESSAGE
            session.last_validation = exc.validation
        elif isinstance(exc, _FAILURES):
            logger.warning("Session operation failed: %s", exc)
            session.last_error = str(exc)
        else:
            session.last_error = f"Unexpected error: {exc}"
        self._transition(session, SessionStatus.ERROR)

    def _transition(self, session: EditSession, status: SessionStatus) -> None:
        previous, session.status = session.status, status
        if previous is not status:
            self._emit(StatusChanged(status=status, previous=previous))

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed on %s", type(event).__name__)
