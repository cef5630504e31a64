"""
Event and state models for explanation streaming.

Wire events are pydantic models forming a discriminated union on ``type``;
the reducer state is a plain mutable dataclass.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..exceptions import MalformedEventPayload, UnrecognizedEventError

DATA_PREFIX = "data: "
LEGACY_DONE_SENTINEL = "[DONE]"


class EventType(Enum):
    """Event types carried in structured ``data:`` payloads."""
    STEP = "step"
    CONTENT = "content"
    ERROR = "error"
    DONE = "done"


class StepEvent(BaseModel):
    """Progress step shown as a header above the explanation."""
    type: Literal["step"] = "step"
    content: str = ""


class ContentEvent(BaseModel):
    """Explanation text to append."""
    type: Literal["content"] = "content"
    content: str = ""


class ErrorEvent(BaseModel):
    """Error reported by the upstream service inside the stream."""
    type: Literal["error"] = "error"
    content: str = ""


class DoneEvent(BaseModel):
    """End of the explanation."""
    type: Literal["done"] = "done"
    content: str = ""


ExplainEvent = Annotated[
    StepEvent | ContentEvent | ErrorEvent | DoneEvent,
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter[Any] = TypeAdapter(ExplainEvent)


def decode_event(payload: str) -> StepEvent | ContentEvent | ErrorEvent | DoneEvent:
    """
    Decode a ``data:`` payload into a typed event.

    Raises:
        MalformedEventPayload: payload is not JSON, or is JSON but not an
            object (legacy plain-text payloads land here).
        UnrecognizedEventError: payload is a JSON object that does not
            match any known event.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedEventPayload(
            f"Payload is not JSON: {e}", payload=payload
        ) from e

    if not isinstance(data, dict):
        raise MalformedEventPayload(
            f"Payload is JSON {type(data).__name__}, not an object",
            payload=payload,
        )

    try:
        return _event_adapter.validate_python(data)
    except ValidationError as e:
        raise UnrecognizedEventError(
            f"Unrecognized event: {e.error_count()} validation error(s)",
            payload=payload,
        ) from e


@dataclass
class RenderState:
    """Mutable reducer state for one session."""
    current_step: str = ""
    accumulated_content: str = ""

    def render(self) -> str:
        """Display text: bold step header (when set) above the content."""
        if not self.current_step:
            return self.accumulated_content
        return f"**{self.current_step}**\n\n{self.accumulated_content}"


class ExplainRequest(BaseModel):
    """JSON body sent to the explain endpoint."""
    return_id: str
    question: str
    use_backend: bool = False
