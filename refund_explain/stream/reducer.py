"""
SSE event reducer for streamed explanations.

Reassembles ``data:`` frames across chunk boundaries and folds the event
sequence into one display string, re-emitted after every processed event.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Callable

from ..exceptions import MalformedEventPayload, UnrecognizedEventError
from ..logging_utils import ContextualLogger
from .framing import LineFrameDecoder
from .models import (
    DATA_PREFIX,
    LEGACY_DONE_SENTINEL,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    EventType,
    RenderState,
    StepEvent,
    decode_event,
)

DisplayCallback = Callable[[str], None]

ERROR_PREFIX = "**Error:** "


class ExplainStreamReducer:
    """
    Per-session reducer from raw stream chunks to display text.

    Once a ``done`` event (or the legacy ``[DONE]`` sentinel) is seen the
    reducer is finished and ignores everything fed to it afterwards,
    including the remaining frames of the same chunk.
    """

    def __init__(
        self,
        on_display: DisplayCallback,
        log: ContextualLogger | None = None,
    ):
        self.on_display = on_display
        self.state = RenderState()
        self.display = ""
        self.finished = False
        self._decoder = LineFrameDecoder()
        self._log = log or ContextualLogger({"component": "explain_reducer"})
        self.stats = {
            "chunks": 0,
            "frames": 0,
            "ignored_frames": 0,
            "legacy_frames": 0,
            "unrecognized_events": 0,
            **{event_type.value: 0 for event_type in EventType},
        }

    def feed(self, chunk: str | bytes) -> None:
        """Process one transport chunk."""
        if self.finished:
            return

        self.stats["chunks"] += 1
        for frame in self._decoder.feed(chunk):
            self.process_frame(frame)
            if self.finished:
                return

    async def consume(self, chunks: AsyncIterable[str | bytes]) -> str:
        """Feed chunks until the stream ends or a terminal event arrives."""
        async for chunk in chunks:
            self.feed(chunk)
            if self.finished:
                break
        return self.display

    def process_frame(self, frame: str) -> None:
        """Process one complete line."""
        self.stats["frames"] += 1

        if not frame.startswith(DATA_PREFIX):
            self.stats["ignored_frames"] += 1
            return

        payload = frame[len(DATA_PREFIX):]
        try:
            event = decode_event(payload)
        except UnrecognizedEventError as e:
            self.stats["unrecognized_events"] += 1
            self._log.debug("Ignoring unrecognized event", reason=str(e))
            return
        except MalformedEventPayload:
            self._apply_legacy(payload)
            return

        self.stats[event.type] += 1
        match event:
            case StepEvent(content=step):
                self.state.current_step = step
                self._emit(self.state.render())
            case ContentEvent(content=text):
                self.state.accumulated_content += text
                self._emit(self.state.render())
            case ErrorEvent(content=message):
                self._emit(ERROR_PREFIX + message)
            case DoneEvent():
                self._finish()

    def _apply_legacy(self, payload: str) -> None:
        """Plain-text payloads from older producers."""
        self.stats["legacy_frames"] += 1
        if payload == LEGACY_DONE_SENTINEL:
            self._finish()
            return

        self.state.accumulated_content += payload
        self._emit(self.state.accumulated_content)

    def _finish(self) -> None:
        self.finished = True
        self._emit(self.state.accumulated_content)

    def _emit(self, text: str) -> None:
        self.display = text
        self.on_display(text)

    @property
    def pending(self) -> str:
        """Unterminated text still held by the frame decoder."""
        return self._decoder.buffer

    def get_stats(self) -> dict[str, int]:
        """Get reducer counters for logging."""
        return self.stats.copy()
