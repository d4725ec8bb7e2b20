"""Request descriptors and raw transport events.

The backend always produces the full event sequence for an exchange:
``SentEvent``, zero or more progress events, then one ``ResponseEvent``.
Failures are raised as ``HTTPErrorResponse`` instead of being yielded.
``HttpClient`` narrows the sequence to what the caller asked to observe.
"""

from __future__ import annotations

import dataclasses
from types import MappingProxyType
import typing

if typing.TYPE_CHECKING:
    from collections.abc import Mapping

    from recordform.http.form_data import MultipartPart

type Observe = typing.Literal["body", "response", "events"]


def _freeze(m: Mapping[str, typing.Any] | None) -> Mapping[str, typing.Any]:
    if isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m or {}))


@dataclasses.dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Everything needed to issue one HTTP request.

    Attributes:
        method: HTTP method.
        url: Absolute URL, or a path relative to the backend's base URL.
        data: Multipart/form fields.
        files: Multipart parts as ``(filename, content[, content_type])``;
            a ``None`` filename sends a plain text field.
        json: JSON body; mutually exclusive with ``data``/``files``.
        headers: Extra request headers.
        report_progress: Emit upload progress events while sending the body.
        observe: Which part of the exchange ``HttpClient`` yields.
    """

    method: str
    url: str
    data: Mapping[str, str] | None = None
    files: Mapping[str, MultipartPart] | None = None
    json: typing.Any = None
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    report_progress: bool = False
    observe: Observe = "body"

    def __post_init__(self) -> None:
        """Validate and freeze request parts."""
        if not self.method or not self.method.strip():
            raise ValueError("method: must be a non-empty str")
        if self.observe not in ("body", "response", "events"):
            raise ValueError(
                f"observe: must be one of body/response/events, got {self.observe!r}"
            )
        if self.json is not None and (self.data or self.files):
            raise ValueError("json: cannot be combined with data or files")
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", _freeze(self.headers))


@dataclasses.dataclass(frozen=True, slots=True)
class SentEvent:
    """The request has been dispatched."""


@dataclasses.dataclass(frozen=True, slots=True)
class UploadProgressEvent:
    """Bytes of the request body sent so far."""

    loaded: int
    total: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class DownloadProgressEvent:
    """Bytes of the response body received so far."""

    loaded: int
    total: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class ResponseEvent:
    """A completed 2xx response with its decoded body."""

    status: int
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    body: typing.Any = None
    url: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the status is in the 2xx range."""
        return 200 <= self.status < 300


@dataclasses.dataclass(frozen=True, slots=True)
class ProgressCounters:
    """Byte counters attached to a failure that never produced a response."""

    loaded: int = 0
    total: int = 0


type HttpEvent = SentEvent | UploadProgressEvent | DownloadProgressEvent | ResponseEvent
