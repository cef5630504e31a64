"""Shared fixtures: an in-process explain endpoint served through httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable, Sequence

import httpx
import pytest

from refund_explain.stream.transport import StreamTransport

EXPLAIN_URL = "http://refund.test/api/v1/status/explain"

ChunkSource = Sequence[str | bytes] | Callable[[], AsyncIterator[bytes]]


class FakeExplainServer:
    """Answers explain requests with scripted SSE chunks and records requests."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, ChunkSource] = {}
        self.status_code = 200
        self.content_type = "text/event-stream"
        self.error: Exception | None = None

    def serve(self, chunks: ChunkSource, return_id: str = "*") -> None:
        self.routes[return_id] = chunks

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        return_id = json.loads(request.content)["return_id"]
        source = self.routes.get(return_id, self.routes.get("*", []))
        if callable(source):
            stream = source()
        else:
            stream = _byte_stream(source)
        return httpx.Response(
            self.status_code,
            headers={"content-type": self.content_type},
            content=stream,
        )


async def _byte_stream(chunks: Sequence[str | bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk.encode() if isinstance(chunk, str) else chunk


@pytest.fixture
def explain_server() -> FakeExplainServer:
    return FakeExplainServer()


@pytest.fixture
def make_transport(explain_server: FakeExplainServer):
    """Factory for StreamTransport instances wired to the fake server."""

    def factory(**kwargs) -> StreamTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(explain_server.handler))
        return StreamTransport(EXPLAIN_URL, client=client, **kwargs)

    return factory
