"""Core data types that flow through the request pipeline.

Outcomes are the classified, immutable results of a single request. Any number
of ``Progress`` values may precede exactly one terminal outcome (``Success``,
``ValidationFailure`` or ``TransportFailure``).
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import typing

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Error taxonomy ---


class TransportFailureKind(str, Enum):
    """Categories of non-validation failure."""

    NETWORK_UNREACHABLE = "network-unreachable"
    MALFORMED_RESPONSE = "malformed-response"
    OTHER = "other"


@dataclasses.dataclass(frozen=True, slots=True)
class FieldError:
    """A single server-side validation error for one field."""

    field: str
    code: str
    message: str


# field name -> error code -> message
type FieldErrorMap = dict[str, dict[str, str]]


# --- Outcomes ---


@dataclasses.dataclass(frozen=True, slots=True)
class Progress:
    """Upload progress in whole percent."""

    percent: int

    def __post_init__(self) -> None:
        """Validate the percent range."""
        _require(
            condition=isinstance(self.percent, int) and 0 <= self.percent <= 100,
            message=f"must be an int within [0, 100], got {self.percent!r}",
            field_name="percent",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class Success:
    """The ``data`` member of a success envelope."""

    data: typing.Any


@dataclasses.dataclass(frozen=True, slots=True)
class ValidationFailure:
    """A 400 response carrying per-field validation errors."""

    field_errors: tuple[FieldError, ...]
    message: str = ""

    def __post_init__(self) -> None:
        """Freeze the error sequence."""
        if not isinstance(self.field_errors, tuple):
            object.__setattr__(self, "field_errors", tuple(self.field_errors))


@dataclasses.dataclass(frozen=True, slots=True)
class TransportFailure:
    """Any failure that is not a validation failure."""

    kind: TransportFailureKind
    recoverable: bool
    error: BaseException | None = dataclasses.field(default=None, compare=False)


type TerminalOutcome = Success | ValidationFailure | TransportFailure
type Outcome = Progress | TerminalOutcome


def is_terminal(outcome: Outcome) -> bool:
    """Return True for outcomes that end a request."""
    return not isinstance(outcome, Progress)


# --- Per-pipeline transient state ---


@dataclasses.dataclass(slots=True)
class InFlightState:
    """Flags a UI binds to while a request is outstanding."""

    is_in_progress: bool = False
    last_upload_percent: int = 0

    def reset(self) -> None:
        """Return to the idle state."""
        self.is_in_progress = False
        self.last_upload_percent = 0
