"""
Explain session controller.

Owns the display text and the loading indicator for the "Explain" action:
- Clears the display when a session starts
- Runs one stream request to completion (or early termination)
- Converts every failure into a single fixed message
- Supersedes an in-flight session when a new one is triggered
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from .logging_utils import ContextualLogger, ExplainErrorHandler, operation_context
from .stream.models import ExplainRequest
from .stream.reducer import DisplayCallback, ExplainStreamReducer
from .stream.transport import StreamTransport

STREAM_ERROR_MESSAGE = "Error loading explanation. Please try again."

LoadingCallback = Callable[[bool], None]


class ExplainSession:
    """
    Session lifecycle for streamed explanations.

    Only one session is in flight at a time. Triggering ``start_stream``
    while another session runs cancels the old one (its call returns
    without emitting anything further) and starts fresh.
    """

    def __init__(
        self,
        transport: StreamTransport,
        on_display: DisplayCallback,
        *,
        question: str,
        on_loading: LoadingCallback | None = None,
    ):
        self.transport = transport
        self.question = question
        self.on_display = on_display
        self.on_loading = on_loading
        self.display = ""
        self.is_loading = False
        self.last_stats: dict[str, int] = {}
        self._active: asyncio.Task[None] | None = None
        self._log = ContextualLogger({"component": "explain_session"})

    async def start_stream(self, return_id: str, use_backend: bool = False) -> None:
        """Run one explanation session for ``return_id``."""
        previous = self._active
        if previous is not None and not previous.done():
            self._log.info("Superseding in-flight explanation", return_id=return_id)
            self._active = None
            previous.cancel()

        self._emit("")
        self._set_loading(True)

        request = ExplainRequest(
            return_id=return_id, question=self.question, use_backend=use_backend
        )
        task = asyncio.create_task(self._run(request))
        self._active = task
        try:
            await task
        except asyncio.CancelledError:
            # Cancelled by this controller (superseded or cancel()): quiet exit
            if self._active is not task and task.cancelled():
                return
            raise
        finally:
            if self._active is task:
                self._active = None
                self._set_loading(False)

    def cancel(self) -> bool:
        """Abort the in-flight session, if any. Returns whether one was running."""
        task = self._active
        if task is None or task.done():
            return False

        self._log.info("Cancelling in-flight explanation")
        self._active = None
        task.cancel()
        self._set_loading(False)
        return True

    async def _run(self, request: ExplainRequest) -> None:
        reducer = ExplainStreamReducer(
            self._emit, log=self._log.bind(return_id=request.return_id)
        )
        context = {"return_id": request.return_id, "use_backend": request.use_backend}
        try:
            async with operation_context("explain_stream", context=context) as log:
                async with self.transport.open(request) as chunks:
                    await reducer.consume(chunks)
                self.last_stats = reducer.get_stats()
                log.debug("Explain stream stats", finished=reducer.finished,
                          **self.last_stats)
        except Exception as e:
            self._log.warning(
                "Explanation failed",
                error_category=ExplainErrorHandler.classify_error(e),
                **context,
            )
            self.last_stats = reducer.get_stats()
            self._emit(STREAM_ERROR_MESSAGE)

    def _emit(self, text: str) -> None:
        self.display = text
        self.on_display(text)

    def _set_loading(self, loading: bool) -> None:
        self.is_loading = loading
        if self.on_loading is not None:
            self.on_loading(loading)
