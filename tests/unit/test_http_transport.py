"""HTTPX backend and interceptor-chain client over ``httpx.MockTransport``."""

import httpx
import pytest

from recordform.core.exceptions import HTTPErrorResponse
from recordform.http.backend import HTTPXBackend
from recordform.http.client import HttpClient
from recordform.http.events import (
    DownloadProgressEvent,
    ProgressCounters,
    RequestDescriptor,
    ResponseEvent,
    SentEvent,
    UploadProgressEvent,
)

pytestmark = pytest.mark.unit

BASE_URL = "http://api.test"
OK_BODY = {"status": "ok", "data": {"id": 1}}


def _backend(handler, **kwargs):
    client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )
    return HTTPXBackend(client, **kwargs), client


async def _collect(stream):
    return [event async for event in stream]


# --- RequestDescriptor ---


def test_descriptor_normalizes_method_and_freezes_headers():
    descriptor = RequestDescriptor("get", "/users/1", headers={"X-A": "1"})
    assert descriptor.method == "GET"
    with pytest.raises(TypeError):
        descriptor.headers["X-B"] = "2"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"method": ""},
        {"observe": "everything"},
        {"json": {"a": 1}, "data": {"b": "2"}},
    ],
)
def test_descriptor_rejects_invalid_combinations(kwargs):
    args = {"method": "PUT", "url": "/users/1", **kwargs}
    with pytest.raises(ValueError):
        RequestDescriptor(**args)


# --- Backend ---


@pytest.mark.asyncio
async def test_backend_yields_sent_then_response():
    backend, client = _backend(lambda request: httpx.Response(200, json=OK_BODY))
    async with client:
        events = await _collect(backend.handle(RequestDescriptor("GET", "/users/1")))

    assert events[0] == SentEvent()
    response = events[-1]
    assert isinstance(response, ResponseEvent)
    assert response.status == 200
    assert response.body == OK_BODY
    assert response.url == f"{BASE_URL}/users/1"
    assert len(events) == 2


@pytest.mark.asyncio
async def test_backend_decodes_non_json_body_as_text():
    backend, client = _backend(lambda request: httpx.Response(200, text="<html>"))
    async with client:
        events = await _collect(backend.handle(RequestDescriptor("GET", "/")))
    assert events[-1].body == "<html>"


@pytest.mark.asyncio
async def test_backend_raises_http_error_for_non_2xx():
    body = {"message": "Invalid", "errors": []}
    backend, client = _backend(lambda request: httpx.Response(400, json=body))
    async with client:
        with pytest.raises(HTTPErrorResponse) as excinfo:
            await _collect(backend.handle(RequestDescriptor("PUT", "/users/1")))

    error = excinfo.value
    assert error.status == 400
    assert error.status_text == "Bad Request"
    assert error.error == body
    assert error.headers


@pytest.mark.asyncio
async def test_backend_maps_connection_failure_to_status_zero():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    backend, client = _backend(refuse)
    async with client:
        with pytest.raises(HTTPErrorResponse) as excinfo:
            await _collect(backend.handle(RequestDescriptor("GET", "/users/1")))

    error = excinfo.value
    assert error.status == 0
    assert error.headers == {}
    assert error.error == ProgressCounters()
    assert isinstance(error.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_backend_streams_upload_progress():
    received = {}

    def handler(request):
        received["body"] = request.content
        received["type"] = request.headers["content-type"]
        return httpx.Response(200, json=OK_BODY)

    backend, client = _backend(handler, upload_chunk_size=100)
    descriptor = RequestDescriptor(
        "PUT",
        "/users/1",
        data={"name": "Ada"},
        files={"avatar": ("a.png", b"x" * 1000, "image/png")},
        report_progress=True,
    )
    async with client:
        events = await _collect(backend.handle(descriptor))

    uploads = [e for e in events if isinstance(e, UploadProgressEvent)]
    total = len(received["body"])
    assert total > 1000
    assert received["type"].startswith("multipart/form-data")
    assert uploads[-1] == UploadProgressEvent(loaded=total, total=total)
    assert [u.loaded for u in uploads] == sorted(u.loaded for u in uploads)
    assert len(uploads) == -(-total // 100)
    assert isinstance(events[-2], DownloadProgressEvent)
    assert isinstance(events[-1], ResponseEvent)


def test_backend_rejects_bad_chunk_size():
    with pytest.raises(ValueError, match="upload_chunk_size"):
        HTTPXBackend(httpx.AsyncClient(), upload_chunk_size=0)


@pytest.mark.asyncio
async def test_backend_closes_only_owned_client():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: None))
    async with HTTPXBackend(client):
        pass
    assert not client.is_closed
    await client.aclose()

    owned = HTTPXBackend(base_url=BASE_URL)
    await owned.aclose()
    assert owned._client.is_closed


# --- HttpClient ---


class FakeBackend:
    def __init__(self, *events):
        self.events = events
        self.requests = []

    async def handle(self, request):
        self.requests.append(request)
        for event in self.events:
            yield event


RESPONSE = ResponseEvent(status=200, body=OK_BODY)
STREAM = (SentEvent(), UploadProgressEvent(loaded=1, total=2), RESPONSE)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("observe", "expected"),
    [
        ("body", [OK_BODY]),
        ("response", [RESPONSE]),
        ("events", list(STREAM)),
    ],
)
async def test_client_projects_by_observe(observe, expected):
    client = HttpClient(FakeBackend(*STREAM))
    assert await _collect(client.get("/users/1", observe=observe)) == expected


@pytest.mark.asyncio
async def test_client_put_builds_descriptor():
    backend = FakeBackend(RESPONSE)
    client = HttpClient(backend)

    await _collect(
        client.put(
            "/users/1",
            data={"name": "Ada"},
            report_progress=True,
            observe="events",
        )
    )

    (request,) = backend.requests
    assert request.method == "PUT"
    assert request.data == {"name": "Ada"}
    assert request.report_progress is True
    assert request.observe == "events"


@pytest.mark.asyncio
async def test_interceptors_run_outermost_first_and_see_all_events():
    order = []

    def tracing(label):
        async def interceptor(request, next_handler):
            order.append(f"{label}:enter")
            async for event in next_handler(request):
                order.append(f"{label}:{type(event).__name__}")
                yield event
            order.append(f"{label}:exit")

        return interceptor

    outer, inner = tracing("outer"), tracing("inner")
    client = HttpClient(FakeBackend(*STREAM), [outer, inner])

    assert client.interceptors == (outer, inner)
    assert await _collect(client.get("/users/1")) == [OK_BODY]
    assert order == [
        "outer:enter",
        "inner:enter",
        "inner:SentEvent",
        "outer:SentEvent",
        "inner:UploadProgressEvent",
        "outer:UploadProgressEvent",
        "inner:ResponseEvent",
        "outer:ResponseEvent",
        "inner:exit",
        "outer:exit",
    ]
