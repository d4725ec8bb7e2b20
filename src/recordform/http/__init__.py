"""Transport layer: request descriptors, raw events, backend and client."""

from recordform.http.backend import HTTPXBackend
from recordform.http.client import Backend, HttpClient, Interceptor
from recordform.http.events import (
    DownloadProgressEvent,
    HttpEvent,
    ProgressCounters,
    RequestDescriptor,
    ResponseEvent,
    SentEvent,
    UploadProgressEvent,
)
from recordform.http.form_data import (
    Attachment,
    MultipartPart,
    generate_form_data,
    multipart_parts,
)

__all__ = [
    "Attachment",
    "Backend",
    "DownloadProgressEvent",
    "HTTPXBackend",
    "HttpClient",
    "HttpEvent",
    "Interceptor",
    "MultipartPart",
    "ProgressCounters",
    "RequestDescriptor",
    "ResponseEvent",
    "SentEvent",
    "UploadProgressEvent",
    "generate_form_data",
    "multipart_parts",
]
