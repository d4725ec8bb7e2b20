"""Response integrity guard applied to every outbound request.

Two raw conditions are re-shaped here before any classification happens:

- a 200 response whose body is not a success envelope becomes a
  ``MalformedResponseError``;
- a failure without status, headers or byte counters becomes a
  ``NetworkUnreachableError``.

Both are announced to the user once and flagged as notified so later stages
do not announce them again. Every other failure passes through untouched.
"""

from __future__ import annotations

from contextlib import aclosing
import logging
from typing import TYPE_CHECKING

from recordform.constants import MALFORMED_RESPONSE_MESSAGE, NO_NETWORK_MESSAGE
from recordform.core.exceptions import (
    HTTPErrorResponse,
    MalformedResponseError,
    NetworkUnreachableError,
)
from recordform.pipeline.classifier import is_invalid_ok_response, is_network_unreachable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from recordform.http.client import Handler
    from recordform.http.events import HttpEvent, RequestDescriptor
    from recordform.notifications import Notifier

logger = logging.getLogger(__name__)


class ResponseIntegrityInterceptor:
    """Interceptor validating success envelopes and detecting lost connectivity."""

    def __init__(self, notifier: Notifier) -> None:
        """Initialize with the channel used for user-facing messages."""
        self._notifier = notifier

    async def __call__(
        self, request: RequestDescriptor, next_handler: Handler
    ) -> AsyncIterator[HttpEvent]:
        """Pass events through, raising synthesized failures where needed.

        Raises:
            MalformedResponseError: On a 200 response with an invalid body.
            NetworkUnreachableError: When the server could not be reached.
            HTTPErrorResponse: Any other raw failure, unchanged.
        """
        try:
            async with aclosing(next_handler(request)) as events:
                async for event in events:
                    if is_invalid_ok_response(event):
                        self._notifier.notify(MALFORMED_RESPONSE_MESSAGE)
                        error = MalformedResponseError(notified=True)
                        logger.warning(
                            "%s: %s %s", error, request.method, request.url
                        )
                        raise error
                    yield event
        except HTTPErrorResponse as e:
            if not is_network_unreachable(e):
                raise
            self._notifier.notify(NO_NETWORK_MESSAGE)
            error = NetworkUnreachableError(notified=True)
            logger.warning("%s: %s %s", error, request.method, request.url)
            raise error from e
