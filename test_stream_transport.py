#!/usr/bin/env python3
"""
Tests for the explain stream HTTP transport.
"""

import httpx
import pytest

from refund_explain.exceptions import StreamUnavailableError, TransportError
from refund_explain.stream.models import ExplainRequest
from refund_explain.stream.transport import StreamTransport

REQUEST = ExplainRequest(
    return_id="ret-42", question="Why is my refund delayed?", use_backend=True
)


async def collect(transport: StreamTransport) -> list[str]:
    async with transport.open(REQUEST) as chunks:
        return [chunk async for chunk in chunks]


class TestStreamTransport:
    """Test opening and reading the explain stream."""

    @pytest.mark.asyncio
    async def test_chunks_arrive_as_sent(self, explain_server, make_transport):
        """Chunk boundaries from the network are passed through untouched."""
        explain_server.serve(["data: Hel", "lo\n\n", "", "data: [DONE]\n\n"])

        chunks = await collect(make_transport())

        assert chunks == ["data: Hel", "lo\n\n", "data: [DONE]\n\n"]

    @pytest.mark.asyncio
    async def test_request_body_and_headers(self, explain_server, make_transport):
        explain_server.serve(["data: [DONE]\n\n"])
        transport = make_transport()

        await collect(transport)

        request = explain_server.requests[0]
        assert request.method == "POST"
        assert str(request.url) == transport.url
        assert request.headers["accept"] == "text/event-stream"
        assert explain_server.bodies == [
            {
                "return_id": "ret-42",
                "question": "Why is my refund delayed?",
                "use_backend": True,
            }
        ]

    @pytest.mark.asyncio
    async def test_multibyte_split_is_decoded(self, explain_server, make_transport):
        encoded = "data: ☕\n".encode()
        explain_server.serve([encoded[:7], encoded[7:]])

        chunks = await collect(make_transport())

        assert "".join(chunks) == "data: ☕\n"

    @pytest.mark.asyncio
    async def test_error_status_raises(self, explain_server, make_transport):
        explain_server.status_code = 503
        explain_server.content_type = "application/json"
        explain_server.serve(['{"error": "Failed to get explanation"}'])

        with pytest.raises(TransportError) as exc_info:
            await collect(make_transport())

        assert exc_info.value.status_code == 503
        assert exc_info.value.return_id == "ret-42"
        assert "Failed to get explanation" in exc_info.value.response_data["body"]

    @pytest.mark.asyncio
    async def test_non_event_stream_rejected(self, explain_server, make_transport):
        explain_server.content_type = "application/json"
        explain_server.serve(['{"status": "approved"}'])

        with pytest.raises(StreamUnavailableError):
            await collect(make_transport())

    @pytest.mark.asyncio
    async def test_content_type_check_can_be_disabled(self, explain_server, make_transport):
        explain_server.content_type = "text/plain"
        explain_server.serve(["data: ok\n"])

        chunks = await collect(make_transport(require_event_stream=False))

        assert chunks == ["data: ok\n"]

    @pytest.mark.asyncio
    async def test_connect_error_wrapped(self, explain_server, make_transport):
        explain_server.error = httpx.ConnectError("Connection refused")

        with pytest.raises(TransportError) as exc_info:
            await collect(make_transport())

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_read_error_mid_stream_wrapped(self, explain_server, make_transport):
        async def broken_stream():
            yield b"data: partial\n"
            raise httpx.ReadError("Connection reset")

        explain_server.serve(broken_stream)
        received: list[str] = []

        with pytest.raises(TransportError) as exc_info:
            async with make_transport().open(REQUEST) as chunks:
                async for chunk in chunks:
                    received.append(chunk)

        assert received == ["data: partial\n"]
        assert isinstance(exc_info.value.__cause__, httpx.ReadError)

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, make_transport):
        transport = make_transport()
        async with transport:
            pass
        assert not transport.client.is_closed

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        transport = StreamTransport("http://refund.test/api/v1/status/explain")
        async with transport:
            pass
        assert transport.client.is_closed
