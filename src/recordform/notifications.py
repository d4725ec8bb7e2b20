"""User-facing notification channel.

The pipeline only ever calls ``notify(message)``; how a message is shown
(banner, toast, log line) is up to the implementation.
"""

from __future__ import annotations

from collections import deque
import logging
from typing import Protocol, runtime_checkable

from recordform.constants import NOTIFICATION_DURATION

log = logging.getLogger(__name__)


@runtime_checkable
class Notifier(Protocol):
    """Fire-and-forget user notification."""

    def notify(self, message: str) -> None: ...  # noqa: D102


class LoggingNotifier:
    """Default notifier: writes each message to the log."""

    def __init__(self, duration: float = NOTIFICATION_DURATION) -> None:
        """Initialize with the display duration reported alongside messages."""
        self.duration = duration

    def notify(self, message: str) -> None:
        """Log ``message`` at INFO level."""
        log.info("notification (%.1fs): %s", self.duration, message)


class CollectingNotifier:
    """Keeps the most recent messages in memory, e.g. for a UI to poll."""

    def __init__(self, max_messages: int = 100) -> None:
        """Initialize an empty, bounded message buffer."""
        self.messages: deque[str] = deque(maxlen=max_messages)

    def notify(self, message: str) -> None:
        """Append ``message`` to the buffer."""
        self.messages.append(message)

    def clear(self) -> None:
        """Drop all collected messages."""
        self.messages.clear()
