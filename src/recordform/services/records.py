"""Records API access."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from recordform.http.form_data import multipart_parts

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from recordform.config import FrozenConfig
    from recordform.http.client import HttpClient


class RecordService:
    """Loads and saves the record being edited."""

    def __init__(self, client: HttpClient, config: FrozenConfig) -> None:
        """Initialize with an HTTP client and the frozen configuration."""
        self._client = client
        self._config = config

    @property
    def record_url(self) -> str:
        """URL of the record being edited."""
        return self._config.record_url

    def load_record(self) -> AsyncIterator[Any]:
        """Fetch the record; yields the decoded success envelope."""
        return self._client.get(self.record_url)

    def save_record(self, values: Mapping[str, Any]) -> AsyncIterator[Any]:
        """Submit form values as one multipart body, reporting upload progress.

        Yields every raw event of the exchange, ending with the response.
        """
        return self._client.put(
            self.record_url,
            files=multipart_parts(values),
            report_progress=True,
            observe="events",
        )
