"""Preview handles for attachment fields.

A selected but unsaved attachment is previewed from a temporary local file.
At most one such file exists per preview; it is deleted when another value
replaces it or when the preview is closed.
"""

from __future__ import annotations

import logging
from pathlib import Path
import tempfile
from types import TracebackType
from typing import TYPE_CHECKING, Self

from recordform.constants import IMAGES_PATH

if TYPE_CHECKING:
    from recordform.http.form_data import Attachment

logger = logging.getLogger(__name__)


class AttachmentPreview:
    """Resolves what to display for one attachment field."""

    def __init__(
        self,
        base_url: str,
        *,
        images_path: str = IMAGES_PATH,
        temp_dir: str | Path | None = None,
    ) -> None:
        """Initialize an empty preview.

        Args:
            base_url: Server base URL used for stored attachments.
            images_path: Path under ``base_url`` serving stored attachments.
            temp_dir: Directory for local preview files; system default if None.
        """
        self._base_url = base_url.rstrip("/")
        self._images_path = images_path.strip("/")
        self._temp_dir = temp_dir
        self._local: Path | None = None
        self.source: str | None = None

    def __enter__(self) -> Self:  # noqa: D105
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def local_path(self) -> Path | None:
        """The live local preview file, if any."""
        return self._local

    def show_stored(self, value: str | None) -> str:
        """Display an attachment already stored on the server.

        Args:
            value: Stored file name, or empty/None for no attachment.

        Returns:
            The display source; empty when there is no attachment.
        """
        self.release()
        self.source = (
            f"{self._base_url}/{self._images_path}/{value}" if value else ""
        )
        return self.source

    def select(self, attachment: Attachment) -> str:
        """Display a newly selected attachment from a local preview file.

        Returns:
            A ``file://`` URI for the preview.
        """
        self.release()
        suffix = Path(attachment.filename).suffix
        with tempfile.NamedTemporaryFile(
            prefix="recordform-preview-",
            suffix=suffix,
            dir=self._temp_dir,
            delete=False,
        ) as handle:
            handle.write(attachment.content)
        self._local = Path(handle.name)
        self.source = self._local.as_uri()
        logger.debug("Created preview %s for %s", self._local, attachment.filename)
        return self.source

    def release(self) -> None:
        """Delete the local preview file, if one is alive."""
        if self._local is None:
            return
        self._local.unlink(missing_ok=True)
        logger.debug("Released preview %s", self._local)
        self._local = None
        self.source = None

    def close(self) -> None:
        """Release the preview; the owner is going away."""
        self.release()
