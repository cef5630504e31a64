"""
HTTP transport for the explain event stream.

Opens a single streaming POST and exposes the body as decoded text chunks.
There are no retries: one request per session, and every failure is raised
to the caller as a ``TransportError`` or ``StreamUnavailableError``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx

from ..logging_utils import logger
from ..exceptions import StreamUnavailableError, TransportError
from .models import ExplainRequest

if TYPE_CHECKING:
    from ..config import Configuration

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


class StreamTransport:
    """Streaming client for the explain endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout: httpx.Timeout | None = None,
        require_event_stream: bool = True,
        chunk_size: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.require_event_stream = require_event_stream
        self.chunk_size = chunk_size
        self._owns_client = client is None
        self.client: httpx.AsyncClient = client or httpx.AsyncClient(
            timeout=timeout or httpx.Timeout(10.0, read=None),
        )

    @classmethod
    def from_config(
        cls, config: Configuration, client: httpx.AsyncClient | None = None
    ) -> StreamTransport:
        """Build a transport from the ``explain`` and ``http_client`` sections."""
        explain_config = config.get_explain_config()
        http_config = config.get_http_client_config()
        timeout = httpx.Timeout(
            connect=http_config["connect_timeout"],
            read=http_config["read_timeout"],
            write=http_config["write_timeout"],
            pool=http_config["pool_timeout"],
        )
        return cls(
            config.explain_url,
            timeout=timeout,
            require_event_stream=explain_config["require_event_stream"],
            chunk_size=http_config["chunk_size"],
            client=client,
        )

    @asynccontextmanager
    async def open(self, request: ExplainRequest) -> AsyncIterator[AsyncIterator[str]]:
        """
        Open the stream for one session.

        Yields an async iterator of text chunks. The response is closed when
        the context exits, whether the stream was drained or abandoned early.

        Raises:
            TransportError: non-success status, or any httpx failure while
                opening or reading.
            StreamUnavailableError: the response is not an event stream.
        """
        try:
            async with self.client.stream(
                "POST",
                self.url,
                json=request.model_dump(),
                headers={"Accept": EVENT_STREAM_CONTENT_TYPE},
            ) as response:
                await self._check_response(response, request)
                chunks = self._iter_chunks(response)
                try:
                    yield chunks
                finally:
                    await chunks.aclose()
        except httpx.HTTPError as e:
            logger.warning(
                "Explain stream transport failure",
                url=self.url,
                return_id=request.return_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise TransportError(
                f"HTTP error: {e!s}", return_id=request.return_id
            ) from e

    async def _check_response(
        self, response: httpx.Response, request: ExplainRequest
    ) -> None:
        content_type = response.headers.get("content-type", "")
        logger.debug(
            "Explain stream opened",
            url=self.url,
            status_code=response.status_code,
            content_type=content_type,
        )

        if not response.is_success:
            error_text = (await response.aread()).decode(errors="replace")
            raise TransportError(
                f"Explain endpoint returned {response.status_code}",
                return_id=request.return_id,
                status_code=response.status_code,
                response_data={"body": error_text},
            )

        if self.require_event_stream and EVENT_STREAM_CONTENT_TYPE not in content_type:
            raise StreamUnavailableError(
                f"Expected streaming response, got content-type: {content_type}",
                return_id=request.return_id,
                status_code=response.status_code,
            )

    async def _iter_chunks(self, response: httpx.Response) -> AsyncGenerator[str]:
        chunk_count = 0
        async for text in response.aiter_text(chunk_size=self.chunk_size):
            if not text:
                continue
            chunk_count += 1
            yield text
        logger.debug("Explain stream exhausted", url=self.url, chunks=chunk_count)

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> StreamTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
