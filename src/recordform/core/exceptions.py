"""Exception hierarchy for the record editing pipeline.

Raw HTTP failures arrive as ``HTTPErrorResponse``. The integrity interceptor
re-shapes two of them into ``TransportFailureError`` subclasses that carry a
``notified`` flag, so later stages know the user has already been told.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from recordform.core.types import TransportFailureKind

if TYPE_CHECKING:
    from collections.abc import Mapping


class RecordFormError(Exception):
    """Base exception for record form errors."""


class ConfigurationError(RecordFormError):
    """Raised when configuration values are missing or invalid."""


class HTTPErrorResponse(RecordFormError):  # noqa: N818
    """A raw HTTP failure as produced by the transport backend.

    Either the server answered with a non-2xx status, or no answer was
    received at all (``status == 0``). In the latter case ``error`` holds the
    byte counters observed before the failure instead of a decoded body.
    """

    ok = False

    def __init__(
        self,
        *,
        status: int = 0,
        status_text: str = "",
        headers: Mapping[str, str] | None = None,
        error: Any = None,
        url: str | None = None,
    ) -> None:
        """Capture the failed exchange.

        Args:
            status: HTTP status code, or 0 when no response was received.
            status_text: Reason phrase reported by the server.
            headers: Response headers; empty when no response was received.
            error: Decoded error body, or a progress-counter payload.
            url: The request URL.
        """
        self.status = status
        self.status_text = status_text
        self.headers: dict[str, str] = dict(headers or {})
        self.error = error
        self.url = url
        if status:
            message = f"Http failure response for {url}: {status} {status_text}"
        else:
            message = f"Http failure response for {url}: 0 Unknown Error"
        super().__init__(message.strip())


class TransportFailureError(RecordFormError):
    """A failure the pipeline reports as a ``TransportFailure`` outcome."""

    kind: TransportFailureKind = TransportFailureKind.OTHER
    recoverable: bool = False

    def __init__(self, message: str, *, notified: bool = False) -> None:
        """Initialize with a message and whether the user was already told."""
        super().__init__(message)
        self.notified = notified


class MalformedResponseError(TransportFailureError):
    """A 200 response whose body is not a success envelope."""

    kind = TransportFailureKind.MALFORMED_RESPONSE
    recoverable = False

    def __init__(self, *, notified: bool = False) -> None:  # noqa: D107
        super().__init__("Invalid response body format", notified=notified)


class NetworkUnreachableError(TransportFailureError):
    """No status, no headers and no byte counters: the server was never reached."""

    kind = TransportFailureKind.NETWORK_UNREACHABLE
    recoverable = True

    def __init__(self, *, notified: bool = False) -> None:  # noqa: D107
        super().__init__("No network connection", notified=notified)


class IncompleteExchangeError(TransportFailureError):
    """The event stream ended without a terminal event."""

    def __init__(self) -> None:  # noqa: D107
        super().__init__("Request completed without a response")


def was_notified(error: BaseException) -> bool:
    """Return True when the user has already been told about ``error``."""
    return bool(getattr(error, "notified", False))
