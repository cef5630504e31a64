"""
Explanation streaming.

This package contains:
- Line framing across chunk boundaries
- Typed event decoding
- The event reducer that builds the display text
- The HTTP stream transport
"""

from __future__ import annotations

from .framing import LineFrameDecoder
from .models import (
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    EventType,
    ExplainRequest,
    RenderState,
    StepEvent,
    decode_event,
)
from .reducer import ExplainStreamReducer
from .transport import StreamTransport

__all__ = [
    "ContentEvent",
    "DoneEvent",
    "ErrorEvent",
    "EventType",
    "ExplainRequest",
    "ExplainStreamReducer",
    "LineFrameDecoder",
    "RenderState",
    "StepEvent",
    "StreamTransport",
    "decode_event",
]
