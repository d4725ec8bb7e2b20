"""Request lifecycle: outcome ordering, in-flight state and notification policy."""

import asyncio

import pytest

from recordform.constants import UNEXPECTED_ERROR_MESSAGE
from recordform.core.exceptions import (
    HTTPErrorResponse,
    MalformedResponseError,
    NetworkUnreachableError,
)
from recordform.core.types import (
    FieldError,
    Progress,
    Success,
    TransportFailure,
    TransportFailureKind,
    ValidationFailure,
)
from recordform.http.events import (
    DownloadProgressEvent,
    ResponseEvent,
    SentEvent,
    UploadProgressEvent,
)
from recordform.pipeline.lifecycle import (
    T_REQUEST_DURATION,
    T_REQUEST_OUTCOME,
    RequestLifecycle,
)
from recordform.telemetry import InMemoryReporter, TelemetryContext

pytestmark = pytest.mark.unit

OK = {"status": "ok", "data": {"id": 1, "name": "Ada"}}


class TrackingStream:
    """Async iterator over fixed events that records whether it was closed."""

    def __init__(self, *events, error=None):
        self._events = list(events)
        self._error = error
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._events:
            return self._events.pop(0)
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        raise StopAsyncIteration

    async def aclose(self):
        self.closed = True


async def _collect(lifecycle, stream):
    return [outcome async for outcome in lifecycle.start(stream)]


# --- Ordering and classification ---


@pytest.mark.asyncio
async def test_progress_then_success(notifier):
    lifecycle = RequestLifecycle(notifier)
    stream = TrackingStream(
        SentEvent(),
        UploadProgressEvent(loaded=25, total=100),
        UploadProgressEvent(loaded=100, total=100),
        DownloadProgressEvent(loaded=10, total=10),
        ResponseEvent(status=200, body=OK),
    )

    outcomes = await _collect(lifecycle, stream)

    assert outcomes == [Progress(25), Progress(100), Success(OK["data"])]
    assert list(notifier.messages) == []


@pytest.mark.asyncio
async def test_bare_body_success(notifier):
    outcomes = await _collect(RequestLifecycle(notifier), TrackingStream(OK))
    assert outcomes == [Success(OK["data"])]


@pytest.mark.asyncio
async def test_success_ends_stream_and_closes_source(notifier):
    stream = TrackingStream(OK, {"status": "ok", "data": "second"})
    outcomes = await _collect(RequestLifecycle(notifier), stream)
    assert outcomes == [Success(OK["data"])]
    assert stream.closed


@pytest.mark.asyncio
async def test_validation_failure_is_absorbed_without_notification(notifier):
    error = HTTPErrorResponse(
        status=400,
        error={
            "message": "Invalid",
            "errors": [{"field": "name", "code": "required", "message": "Name?"}],
        },
    )

    outcomes = await _collect(
        RequestLifecycle(notifier), TrackingStream(SentEvent(), error=error)
    )

    assert outcomes == [
        ValidationFailure(
            field_errors=(FieldError("name", "required", "Name?"),), message="Invalid"
        )
    ]
    assert list(notifier.messages) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "kind", "recoverable"),
    [
        (
            NetworkUnreachableError(notified=True),
            TransportFailureKind.NETWORK_UNREACHABLE,
            True,
        ),
        (
            MalformedResponseError(notified=True),
            TransportFailureKind.MALFORMED_RESPONSE,
            False,
        ),
    ],
)
async def test_already_notified_failures_are_not_notified_again(
    notifier, error, kind, recoverable
):
    outcomes = await _collect(RequestLifecycle(notifier), TrackingStream(error=error))

    assert outcomes == [TransportFailure(kind, recoverable)]
    assert list(notifier.messages) == []


@pytest.mark.asyncio
async def test_other_failure_notifies_generic_message_once(notifier):
    error = HTTPErrorResponse(status=500, error={"message": "boom"})

    outcomes = await _collect(RequestLifecycle(notifier), TrackingStream(error=error))

    assert outcomes == [TransportFailure(TransportFailureKind.OTHER, False)]
    assert outcomes[0].error is error
    assert list(notifier.messages) == [UNEXPECTED_ERROR_MESSAGE]


@pytest.mark.asyncio
async def test_custom_unexpected_error_handler_replaces_notification(notifier):
    seen = []
    lifecycle = RequestLifecycle(notifier, unexpected_error_handler=seen.append)
    error = RuntimeError("boom")

    await _collect(lifecycle, TrackingStream(error=error))

    assert seen == [error]
    assert list(notifier.messages) == []


@pytest.mark.asyncio
async def test_stream_without_terminal_event_fails_as_other(notifier):
    outcomes = await _collect(
        RequestLifecycle(notifier),
        TrackingStream(SentEvent(), ResponseEvent(status=204)),
    )
    assert outcomes == [TransportFailure(TransportFailureKind.OTHER, False)]
    assert list(notifier.messages) == [UNEXPECTED_ERROR_MESSAGE]


# --- In-flight state ---


@pytest.mark.asyncio
async def test_start_marks_in_progress_synchronously(notifier):
    lifecycle = RequestLifecycle(notifier)
    outcomes = lifecycle.start(TrackingStream(OK))
    assert lifecycle.is_in_progress
    await outcomes.aclose()


@pytest.mark.asyncio
async def test_state_reset_before_terminal_outcome_is_delivered(notifier):
    lifecycle = RequestLifecycle(notifier)
    seen = []
    async for outcome in lifecycle.start(
        TrackingStream(UploadProgressEvent(loaded=50, total=100), OK)
    ):
        seen.append((outcome, lifecycle.is_in_progress, lifecycle.last_upload_percent))

    assert seen == [
        (Progress(50), True, 50),
        (Success(OK["data"]), False, 0),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "stream",
    [
        TrackingStream(OK),
        TrackingStream(error=HTTPErrorResponse(status=500)),
        TrackingStream(error=NetworkUnreachableError(notified=True)),
        TrackingStream(error=HTTPErrorResponse(status=400, error={"errors": []})),
    ],
)
async def test_state_always_ends_idle(notifier, stream):
    lifecycle = RequestLifecycle(notifier)
    await _collect(lifecycle, stream)
    assert not lifecycle.is_in_progress
    assert lifecycle.last_upload_percent == 0


@pytest.mark.asyncio
async def test_abandoning_stream_midway_resets_state_and_closes_source(notifier):
    lifecycle = RequestLifecycle(notifier)
    stream = TrackingStream(UploadProgressEvent(loaded=1, total=2), OK)
    outcomes = lifecycle.start(stream)

    first = await outcomes.__anext__()
    assert first == Progress(50)
    await outcomes.aclose()

    assert not lifecycle.is_in_progress
    assert stream.closed


@pytest.mark.asyncio
async def test_cancellation_resets_state(notifier):
    lifecycle = RequestLifecycle(notifier)
    gate = asyncio.Event()

    async def never_answers():
        yield SentEvent()
        await gate.wait()

    task = asyncio.create_task(lifecycle.run(never_answers()))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert lifecycle.is_in_progress

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert not lifecycle.is_in_progress


# --- run() callbacks ---


@pytest.mark.asyncio
async def test_run_dispatches_to_callbacks(notifier):
    lifecycle = RequestLifecycle(notifier)
    calls = []

    terminal = await lifecycle.run(
        TrackingStream(UploadProgressEvent(loaded=3, total=4), OK),
        on_progress=lambda p: calls.append(("progress", p)),
        on_success=lambda d: calls.append(("success", d)),
        on_validation_failure=lambda f: calls.append(("validation", f)),
        on_failure=lambda f: calls.append(("failure", f)),
    )

    assert terminal == Success(OK["data"])
    assert calls == [("progress", 75), ("success", OK["data"])]


@pytest.mark.asyncio
async def test_run_routes_failures(notifier):
    lifecycle = RequestLifecycle(notifier)
    failures = []

    terminal = await lifecycle.run(
        TrackingStream(error=NetworkUnreachableError(notified=True)),
        on_failure=failures.append,
    )

    assert failures == [terminal]
    assert terminal.kind is TransportFailureKind.NETWORK_UNREACHABLE


# --- Telemetry ---


@pytest.mark.asyncio
async def test_outcomes_are_counted_when_telemetry_enabled(notifier, monkeypatch):
    monkeypatch.setenv("RECORDFORM_TELEMETRY", "1")
    reporter = InMemoryReporter()
    lifecycle = RequestLifecycle(
        notifier, name="save", telemetry=TelemetryContext(reporter)
    )

    await _collect(lifecycle, TrackingStream(OK))
    await _collect(lifecycle, TrackingStream(error=HTTPErrorResponse(status=500)))

    assert reporter.total(T_REQUEST_OUTCOME, request="save", kind="success") == 1
    assert reporter.total(T_REQUEST_OUTCOME, request="save", kind="other") == 1
    assert len(reporter.metrics[T_REQUEST_DURATION]) == 2


# --- Success decoding ---


@pytest.mark.asyncio
async def test_decode_replaces_success_data(notifier):
    lifecycle = RequestLifecycle(notifier)
    outcomes = [
        o
        async for o in lifecycle.start(TrackingStream(OK), decode=lambda d: d["name"])
    ]
    assert outcomes == [Success("Ada")]


@pytest.mark.asyncio
async def test_decode_error_becomes_failure_outcome(notifier):
    lifecycle = RequestLifecycle(notifier)
    successes = []

    def reject(_data):
        raise MalformedResponseError(notified=True)

    terminal = await lifecycle.run(
        TrackingStream(OK), decode=reject, on_success=successes.append
    )

    assert terminal == TransportFailure(
        TransportFailureKind.MALFORMED_RESPONSE, recoverable=False
    )
    assert successes == []
    assert list(notifier.messages) == []
    assert not lifecycle.is_in_progress


class FailingCloseStream(TrackingStream):
    async def aclose(self):
        raise RuntimeError("close failed")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("stream", "expected"),
    [
        (FailingCloseStream(OK), Success(OK["data"])),
        (
            FailingCloseStream(error=HTTPErrorResponse(status=500)),
            TransportFailure(TransportFailureKind.OTHER, False),
        ),
    ],
)
async def test_failing_close_still_yields_terminal_outcome(
    notifier, caplog, stream, expected
):
    lifecycle = RequestLifecycle(notifier)

    outcomes = await _collect(lifecycle, stream)

    assert outcomes == [expected]
    assert not lifecycle.is_in_progress
    assert "closing the event stream failed" in caplog.text
