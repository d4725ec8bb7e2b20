"""Envelope decoding and outcome classification.

Wire contract::

    200 OK:          {"status": "ok", "data": <T>}
    400 Bad Request: {"message": str, "errors": [{"field", "code", "message"}, ...]}

Every decode step accepts only plain JSON objects (dicts). Anything that does
not match one of the two envelopes is left to the generic failure branch.
"""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from recordform.core.exceptions import HTTPErrorResponse, TransportFailureError
from recordform.core.types import (
    FieldError,
    Success,
    TerminalOutcome,
    TransportFailure,
    TransportFailureKind,
    ValidationFailure,
)
from recordform.http.events import ResponseEvent


class SuccessEnvelope(BaseModel):
    """``{"status": "ok", "data": ...}``; ``data`` must be present but may be null."""

    model_config = ConfigDict(extra="allow")

    status: Literal["ok"]
    data: Any


class FieldErrorEntry(BaseModel):
    """One entry of a validation error envelope."""

    field: str
    code: str
    message: str


class ValidationErrorEnvelope(BaseModel):
    """``{"message": ..., "errors": [...]}``."""

    model_config = ConfigDict(extra="allow")

    message: str
    errors: list[FieldErrorEntry]


def decode_success_envelope(value: Any) -> SuccessEnvelope | None:
    """Decode a success envelope, or return None when ``value`` is not one."""
    if not isinstance(value, Mapping):
        return None
    try:
        return SuccessEnvelope.model_validate(dict(value))
    except ValidationError:
        return None


def decode_validation_envelope(value: Any) -> ValidationErrorEnvelope | None:
    """Decode a validation error envelope, or return None."""
    if not isinstance(value, Mapping):
        return None
    try:
        return ValidationErrorEnvelope.model_validate(dict(value))
    except ValidationError:
        return None


def is_success_envelope(value: Any) -> bool:
    """Return True when ``value`` is a plain success envelope."""
    return decode_success_envelope(value) is not None


def classify_value(value: Any) -> Success | None:
    """Extract success data from a bare payload or a wrapped response.

    Args:
        value: Anything the client yields: a decoded body, a ``ResponseEvent``
            or another raw event.

    Returns:
        ``Success`` carrying the envelope's ``data``, or None for values that
        do not carry a success envelope.
    """
    body = value.body if isinstance(value, ResponseEvent) else value
    envelope = decode_success_envelope(body)
    if envelope is None:
        return None
    return Success(data=envelope.data)


def is_invalid_ok_response(event: Any) -> bool:
    """Return True for a 200 response whose body is not a success envelope."""
    return (
        isinstance(event, ResponseEvent)
        and event.status == HTTPStatus.OK
        and not is_success_envelope(event.body)
    )


def _counter(payload: Any, name: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(name)
    return getattr(payload, name, None)


def is_network_unreachable(error: BaseException) -> bool:
    """Return True when a raw failure never reached the server.

    Such a failure has no headers, no status code and no byte counters.
    """
    return (
        isinstance(error, HTTPErrorResponse)
        and not error.headers
        and not error.ok
        and not error.status
        and not _counter(error.error, "loaded")
        and not _counter(error.error, "total")
    )


def decode_validation_failure(error: BaseException) -> ValidationFailure | None:
    """Return a ``ValidationFailure`` for a 400 carrying a validation envelope."""
    if not (
        isinstance(error, HTTPErrorResponse) and error.status == HTTPStatus.BAD_REQUEST
    ):
        return None
    envelope = decode_validation_envelope(error.error)
    if envelope is None:
        return None
    return ValidationFailure(
        field_errors=tuple(
            FieldError(field=e.field, code=e.code, message=e.message)
            for e in envelope.errors
        ),
        message=envelope.message,
    )


def classify_failure(error: BaseException) -> TerminalOutcome:
    """Classify a failure; validation takes precedence over everything else."""
    validation = decode_validation_failure(error)
    if validation is not None:
        return validation
    if isinstance(error, TransportFailureError):
        return TransportFailure(
            kind=error.kind, recoverable=error.recoverable, error=error
        )
    return TransportFailure(
        kind=TransportFailureKind.OTHER, recoverable=False, error=error
    )
