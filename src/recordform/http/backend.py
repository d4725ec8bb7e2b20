"""httpx-backed transport that produces raw HTTP events.

When a request asks for progress, the encoded body is streamed to the server
in fixed-size chunks and an ``UploadProgressEvent`` is emitted after each one.
Connection-level failures are reported as ``HTTPErrorResponse`` with status 0,
no headers and the byte counters reached before the failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Self

import httpx

from recordform.constants import NETWORK_TIMEOUT, UPLOAD_CHUNK_SIZE
from recordform.core.exceptions import HTTPErrorResponse
from recordform.http.events import (
    DownloadProgressEvent,
    ProgressCounters,
    ResponseEvent,
    SentEvent,
    UploadProgressEvent,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from recordform.http.events import HttpEvent, RequestDescriptor

logger = logging.getLogger(__name__)

# Marks the end of the upload event queue.
_SEND_DONE = object()


class HTTPXBackend:
    """Issues ``RequestDescriptor``s over an ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str = "",
        timeout: float = NETWORK_TIMEOUT,
        upload_chunk_size: int = UPLOAD_CHUNK_SIZE,
    ) -> None:
        """Initialize the backend.

        Args:
            client: Optional preconfigured client. When omitted, one is created
                from ``base_url``/``timeout`` and closed by ``aclose()``.
            base_url: Base URL for relative request URLs.
            timeout: Request timeout in seconds.
            upload_chunk_size: Chunk size used when streaming bodies with progress.
        """
        if upload_chunk_size < 1:
            raise ValueError("upload_chunk_size must be >= 1")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._chunk_size = upload_chunk_size

    async def aclose(self) -> None:
        """Close the underlying client if this backend created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:  # noqa: D105
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def handle(self, request: RequestDescriptor) -> AsyncIterator[HttpEvent]:
        """Run one exchange, yielding every raw event.

        Raises:
            HTTPErrorResponse: For non-2xx responses and connection failures.
        """
        outgoing = self._client.build_request(
            request.method,
            request.url,
            data=dict(request.data) if request.data else None,
            files=dict(request.files) if request.files else None,
            json=request.json,
            headers=dict(request.headers),
        )
        yield SentEvent()

        if request.report_progress:
            body = outgoing.read()
            counters = ProgressCounters()
            queue: asyncio.Queue[Any] = asyncio.Queue()
            streamed = httpx.Request(
                outgoing.method,
                outgoing.url,
                headers=outgoing.headers,
                content=self._chunked(body, queue),
            )
            send = asyncio.create_task(self._client.send(streamed))
            send.add_done_callback(lambda _task: queue.put_nowait(_SEND_DONE))
            try:
                while True:
                    event = await queue.get()
                    if event is _SEND_DONE:
                        break
                    counters = ProgressCounters(loaded=event.loaded, total=len(body))
                    yield event
            finally:
                if not send.done():
                    send.cancel()
            response = await self._complete(send, str(outgoing.url), counters)
            yield DownloadProgressEvent(
                loaded=len(response.content),
                total=_content_length(response),
            )
        else:
            response = await self._complete(
                self._client.send(outgoing), str(outgoing.url), ProgressCounters()
            )

        yield self._to_event(response)

    async def _chunked(
        self, body: bytes, queue: asyncio.Queue[Any]
    ) -> AsyncIterator[bytes]:
        total = len(body)
        loaded = 0
        for start in range(0, total, self._chunk_size):
            chunk = body[start : start + self._chunk_size]
            yield chunk
            loaded += len(chunk)
            queue.put_nowait(UploadProgressEvent(loaded=loaded, total=total))

    async def _complete(
        self,
        pending: Any,
        url: str,
        counters: ProgressCounters,
    ) -> httpx.Response:
        try:
            return await pending
        except httpx.TransportError as e:
            logger.debug("Transport failure for %s: %s", url, e)
            raise HTTPErrorResponse(status=0, error=counters, url=url) from e

    def _to_event(self, response: httpx.Response) -> ResponseEvent:
        body = _decode_body(response)
        url = str(response.request.url)
        if response.is_success:
            return ResponseEvent(
                status=response.status_code,
                headers=dict(response.headers),
                body=body,
                url=url,
            )
        raise HTTPErrorResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            error=body,
            url=url,
        )


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("content-length")
    return int(raw) if raw and raw.isdigit() else None
