"""
Error types for explanation streaming.

Transport failures carry the context needed for logging (status code, the
response body) but never reach the display: the session boundary converts
every one of them into a single fixed message.

Payload errors are raised by the event decoder and recovered locally by
the reducer.
"""

from __future__ import annotations

from typing import Any


class ExplainError(Exception):
    """Base explanation-stream error with request context."""

    def __init__(
        self,
        message: str,
        *,
        return_id: str | None = None,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.return_id = return_id
        self.status_code = status_code
        self.response_data = response_data or {}


class TransportError(ExplainError):
    """The stream could not be opened or read (bad status, network failure)."""
    pass


class StreamUnavailableError(ExplainError):
    """The response has no readable event-stream body."""
    pass


class MalformedEventPayload(ExplainError):
    """A ``data:`` payload is not structured event data."""

    def __init__(self, message: str, payload: str, **kwargs):
        super().__init__(message, **kwargs)
        self.payload = payload


class UnrecognizedEventError(MalformedEventPayload):
    """Payload is a JSON object, but not one of the known event types."""
    pass
