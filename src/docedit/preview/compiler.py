"""Debounced, generation-tagged preview compilation.

Every :meth:`PreviewCompiler.submit` advances a generation counter and
(re)arms a debounce timer.  When the timer fires the snapshot is compiled
in a background task; results are published only if their generation is
still the latest, so a slow early compile can never overwrite a newer one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping

from docedit.models.session import CompilationRequest, PreviewResult, PreviewStatus
from docedit.preview.backend import (
    PREVIEW_UNAVAILABLE,
    CompilationError,
    CompilerUnavailableError,
    PreviewBackend,
)

logger = logging.getLogger("docedit.preview")

DEFAULT_DEBOUNCE_SECONDS = 0.3

ResultSink = Callable[[PreviewResult], None]


class PreviewCompiler:
    """Compiles content snapshots off the typing path.

    One instance per edit session; the generation counter starts at zero
    and only ever increases.  Must be driven from a running event loop.
    """

    def __init__(
        self,
        backend: PreviewBackend | None,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_result: ResultSink | None = None,
        components: Mapping[str, str] | None = None,
    ) -> None:
        self._backend = backend
        self._debounce = debounce_seconds
        self._on_result = on_result
        self._components = dict(components or {})
        self._generation = 0
        self._enabled = True
        self._latest: PreviewResult | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._pending: CompilationRequest | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    # -- state ---------------------------------------------------------------

    @property
    def generation(self) -> int:
        """The latest generation issued."""
        return self._generation

    @property
    def latest(self) -> PreviewResult | None:
        """The newest result that was not discarded as stale."""
        return self._latest

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def busy(self) -> bool:
        """True while a debounce timer is armed or a compile is in flight."""
        return self._timer is not None or bool(self._inflight)

    # -- public API ----------------------------------------------------------

    def submit(self, content: str) -> int:
        """Queue *content* for compilation and return its generation."""
        self._generation += 1
        request = CompilationRequest(content_snapshot=content, generation=self._generation)
        self._cancel_timer()
        if not self._enabled:
            return request.generation

        self._pending = request
        self._timer = asyncio.get_running_loop().call_later(self._debounce, self._fire)
        return request.generation

    def enable(self) -> None:
        """Resume compiling after the backend was reported unavailable."""
        self._enabled = True

    def cancel(self) -> None:
        """Drop the pending timer and invalidate every in-flight compile."""
        self._cancel_timer()
        self._generation += 1

    async def drain(self) -> None:
        """Compile any pending snapshot now and wait for in-flight work."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._fire()
        while self._inflight:
            await asyncio.gather(*self._inflight)

    # -- internal ------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._pending = None

    def _fire(self) -> None:
        request, self._pending, self._timer = self._pending, None, None
        if request is None:
            return
        task = asyncio.get_running_loop().create_task(self._compile(request))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _compile(self, request: CompilationRequest) -> None:
        if self._backend is None:
            self._disable(request, PREVIEW_UNAVAILABLE)
            return

        try:
            compiled = await self._backend.compile(request.content_snapshot, self._components)
        except CompilerUnavailableError as exc:
            self._disable(request, exc.message)
            return
        except CompilationError as exc:
            result = PreviewResult(
                status=PreviewStatus.ERROR, generation=request.generation, message=exc.message
            )
        except Exception as exc:
            logger.exception("Preview backend failed on generation %d", request.generation)
            result = PreviewResult(
                status=PreviewStatus.ERROR,
                generation=request.generation,
                message=f"Compilation failed: {exc}",
            )
        else:
            result = PreviewResult(
                status=PreviewStatus.READY,
                generation=request.generation,
                rendered=compiled.body,
                frontmatter=compiled.frontmatter,
            )
        self._publish(result)

    def _disable(self, request: CompilationRequest, message: str) -> None:
        # A stale request leaves reporting to the newer one.
        if request.generation != self._generation or not self._enabled:
            return
        logger.warning("Preview disabled: %s", message)
        self._enabled = False
        self._cancel_timer()
        self._publish(
            PreviewResult(status=PreviewStatus.ERROR, generation=request.generation, message=message)
        )

    def _publish(self, result: PreviewResult) -> None:
        if result.generation != self._generation:
            logger.debug(
                "Discarding stale preview (generation %d, latest %d)",
                result.generation,
                self._generation,
            )
            return
        self._latest = result
        if self._on_result is not None:
            self._on_result(result)
