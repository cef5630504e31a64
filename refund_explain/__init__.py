"""
Streamed refund status explanations.

This package provides:
- An HTTP transport for the explain event stream
- An incremental SSE reducer that builds the display text
- A session controller for the "Explain" action
- YAML/.env configuration and structured logging
"""

from __future__ import annotations

from .config import Configuration
from .exceptions import (
    ExplainError,
    MalformedEventPayload,
    StreamUnavailableError,
    TransportError,
    UnrecognizedEventError,
)
from .session import STREAM_ERROR_MESSAGE, ExplainSession
from .stream import ExplainRequest, ExplainStreamReducer, StreamTransport

__all__ = [
    "STREAM_ERROR_MESSAGE",
    "Configuration",
    "ExplainError",
    "ExplainRequest",
    "ExplainSession",
    "ExplainStreamReducer",
    "MalformedEventPayload",
    "StreamTransport",
    "StreamUnavailableError",
    "TransportError",
    "UnrecognizedEventError",
]
