"""HTTP client that runs interceptors around a backend.

Interceptors see the full raw event stream regardless of what the caller
observes; the client narrows the stream only after the whole chain has run.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import TYPE_CHECKING, Any, Protocol

from recordform.http.events import RequestDescriptor, ResponseEvent

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable

    from recordform.http.events import HttpEvent, Observe
    from recordform.http.form_data import MultipartPart

    type Handler = Callable[[RequestDescriptor], AsyncIterator[HttpEvent]]


class Backend(Protocol):
    """Anything that can turn a request into raw events."""

    def handle(self, request: RequestDescriptor) -> AsyncIterator[HttpEvent]: ...  # noqa: D102


class Interceptor(Protocol):
    """Wraps the rest of the chain for a single request."""

    def __call__(  # noqa: D102
        self, request: RequestDescriptor, next_handler: Handler
    ) -> AsyncIterator[HttpEvent]: ...


def _bind(interceptor: Interceptor, next_handler: Handler) -> Handler:
    def handler(request: RequestDescriptor) -> AsyncIterator[HttpEvent]:
        return interceptor(request, next_handler)

    return handler


class HttpClient:
    """Issues requests through an interceptor chain."""

    def __init__(
        self, backend: Backend, interceptors: Iterable[Interceptor] = ()
    ) -> None:
        """Build the chain; the first interceptor is the outermost."""
        self._backend = backend
        self._interceptors = tuple(interceptors)
        handler: Handler = backend.handle
        for interceptor in reversed(self._interceptors):
            handler = _bind(interceptor, handler)
        self._handler = handler

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        """Interceptors in execution order, outermost first."""
        return self._interceptors

    async def request(self, descriptor: RequestDescriptor) -> AsyncIterator[Any]:
        """Yield the parts of the exchange selected by ``descriptor.observe``.

        ``"events"`` yields every event, ``"response"`` only the final
        ``ResponseEvent`` and ``"body"`` only its decoded body.
        """
        async with aclosing(self._handler(descriptor)) as events:
            async for event in events:
                if descriptor.observe == "events":
                    yield event
                elif isinstance(event, ResponseEvent):
                    yield event if descriptor.observe == "response" else event.body

    def get(self, url: str, *, observe: Observe = "body") -> AsyncIterator[Any]:
        """Issue a GET request."""
        return self.request(RequestDescriptor("GET", url, observe=observe))

    def put(
        self,
        url: str,
        *,
        data: dict[str, str] | None = None,
        files: dict[str, MultipartPart] | None = None,
        json: Any = None,
        report_progress: bool = False,
        observe: Observe = "body",
    ) -> AsyncIterator[Any]:
        """Issue a PUT request."""
        return self.request(
            RequestDescriptor(
                "PUT",
                url,
                data=data,
                files=files,
                json=json,
                report_progress=report_progress,
                observe=observe,
            )
        )
