"""Upload progress extraction."""

from __future__ import annotations

import math
from typing import Any

from recordform.core.types import Progress
from recordform.http.events import UploadProgressEvent


def upload_percent(event: Any) -> int | None:
    """Return the whole-percent upload progress carried by ``event``.

    Only upload progress events with a known, non-zero ``total`` report
    progress; everything else returns None.
    """
    if not isinstance(event, UploadProgressEvent) or not event.total:
        return None
    # Round half up.
    percent = math.floor(100 * event.loaded / event.total + 0.5)
    return max(0, min(100, percent))


def progress_outcome(event: Any) -> Progress | None:
    """Wrap ``upload_percent`` into a ``Progress`` outcome."""
    percent = upload_percent(event)
    return None if percent is None else Progress(percent)
