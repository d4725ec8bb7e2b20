"""Request lifecycle: classify one request's event stream into outcomes.

``RequestLifecycle.start()`` marks the request in flight and returns an async
iterator of outcomes: zero or more ``Progress`` values followed by exactly one
terminal outcome. Classification branches, in order of precedence:

1. upload progress event with a known total -> ``Progress``
2. success envelope (bare body, wrapped response or terminal event) -> ``Success``
3. 400 carrying a validation envelope -> ``ValidationFailure`` (fully handled)
4. anything else -> ``TransportFailure``, reported on the unexpected-error
   channel unless the interceptor already notified the user

The in-flight state is reset exactly once per request, before the terminal
outcome is handed to the caller, and also when the consumer abandons the
stream early. No locking happens here: overlapping requests on one instance
share its flags and callers gate new requests on ``is_in_progress``.
"""

from __future__ import annotations

from contextlib import aclosing
import logging
from time import perf_counter
from typing import TYPE_CHECKING, Any

from recordform.constants import UNEXPECTED_ERROR_MESSAGE
from recordform.core.exceptions import IncompleteExchangeError, was_notified
from recordform.core.types import (
    InFlightState,
    Progress,
    Success,
    TransportFailure,
    ValidationFailure,
)
from recordform.pipeline.classifier import classify_failure, classify_value
from recordform.pipeline.progress import progress_outcome
from recordform.telemetry import TelemetryContext

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from recordform.core.types import Outcome, TerminalOutcome
    from recordform.notifications import Notifier
    from recordform.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

# --- Telemetry scopes/keys ---
T_REQUEST_OUTCOME = "request.outcome"
T_REQUEST_DURATION = "request.duration"


def _outcome_label(outcome: TerminalOutcome) -> str:
    if isinstance(outcome, Success):
        return "success"
    if isinstance(outcome, ValidationFailure):
        return "validation"
    return outcome.kind.value


class RequestLifecycle:
    """Classifies request event streams and tracks in-flight state.

    One instance belongs to one editing session and one kind of request
    (for example "load" or "save").
    """

    def __init__(
        self,
        notifier: Notifier,
        *,
        name: str = "request",
        unexpected_error_handler: Callable[[BaseException], None] | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the lifecycle.

        Args:
            notifier: User-facing notification channel.
            name: Label used in logs and telemetry.
            unexpected_error_handler: Receives failures that were neither
                validation failures nor already notified. Defaults to a
                generic notification.
            telemetry: Optional telemetry context.
        """
        self._notifier = notifier
        self._name = name
        self._unexpected = unexpected_error_handler or self._notify_unexpected
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()
        self.state = InFlightState()

    @property
    def name(self) -> str:
        """Label used in logs and telemetry."""
        return self._name

    @property
    def is_in_progress(self) -> bool:
        """Whether a request is currently outstanding."""
        return self.state.is_in_progress

    @property
    def last_upload_percent(self) -> int:
        """Most recent upload progress of the outstanding request."""
        return self.state.last_upload_percent

    def start(
        self,
        events: AsyncIterator[Any],
        *,
        decode: Callable[[Any], Any] | None = None,
    ) -> AsyncIterator[Outcome]:
        """Mark the request in flight and return its outcome stream.

        Args:
            events: What the HTTP client yields for the request: bare bodies,
                wrapped responses or raw events. Failures are raised.
            decode: Applied to the success data before the terminal outcome is
                built. An exception it raises is classified like any other
                failure of the request.

        Returns:
            An async iterator of ``Progress`` outcomes followed by one
            terminal outcome.
        """
        self.state.is_in_progress = True
        return self._outcomes(events, decode)

    async def run(
        self,
        events: AsyncIterator[Any],
        *,
        decode: Callable[[Any], Any] | None = None,
        on_progress: Callable[[int], None] | None = None,
        on_success: Callable[[Any], None] | None = None,
        on_validation_failure: Callable[[ValidationFailure], None] | None = None,
        on_failure: Callable[[TransportFailure], None] | None = None,
    ) -> TerminalOutcome:
        """Drive a request to completion, dispatching outcomes to callbacks.

        Returns:
            The terminal outcome.
        """
        terminal: TerminalOutcome | None = None
        async with aclosing(self.start(events, decode=decode)) as outcomes:
            async for outcome in outcomes:
                if isinstance(outcome, Progress):
                    if on_progress is not None:
                        on_progress(outcome.percent)
                    continue
                terminal = outcome
                if isinstance(outcome, Success):
                    if on_success is not None:
                        on_success(outcome.data)
                elif isinstance(outcome, ValidationFailure):
                    if on_validation_failure is not None:
                        on_validation_failure(outcome)
                elif on_failure is not None:
                    on_failure(outcome)
        if terminal is None:  # pragma: no cover - _outcomes always ends with one
            raise RuntimeError("request ended without a terminal outcome")
        return terminal

    async def _outcomes(
        self,
        events: AsyncIterator[Any],
        decode: Callable[[Any], Any] | None,
    ) -> AsyncIterator[Outcome]:
        terminal: TerminalOutcome | None = None
        started = perf_counter()
        try:
            try:
                async for event in events:
                    progress = progress_outcome(event)
                    if progress is not None:
                        self.state.last_upload_percent = progress.percent
                        yield progress
                        continue
                    success = classify_value(event)
                    if success is not None:
                        if decode is not None:
                            success = Success(decode(success.data))
                        terminal = success
                        break
            except Exception as e:
                terminal = self._on_failure(e)
            else:
                if terminal is None:
                    terminal = self._on_failure(IncompleteExchangeError())
            finally:
                aclose = getattr(events, "aclose", None)
                if aclose is not None:
                    try:
                        await aclose()
                    except Exception:
                        logger.warning(
                            "%s: closing the event stream failed",
                            self._name,
                            exc_info=True,
                        )
        finally:
            self.state.reset()

        self._telemetry.metric(
            T_REQUEST_DURATION, perf_counter() - started, request=self._name
        )
        self._telemetry.count(
            T_REQUEST_OUTCOME, request=self._name, kind=_outcome_label(terminal)
        )
        yield terminal

    def _on_failure(self, error: Exception) -> TerminalOutcome:
        outcome = classify_failure(error)
        if isinstance(outcome, ValidationFailure):
            logger.debug(
                "%s: validation failed for %d field(s)",
                self._name,
                len(outcome.field_errors),
            )
        elif was_notified(error):
            logger.debug("%s failed, user already notified: %s", self._name, error)
        else:
            logger.warning("%s failed: %s", self._name, error)
            self._unexpected(error)
        return outcome

    def _notify_unexpected(self, error: BaseException) -> None:  # noqa: ARG002
        self._notifier.notify(UNEXPECTED_ERROR_MESSAGE)
