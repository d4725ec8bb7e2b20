"""Multipart form encoding for record submissions."""

from __future__ import annotations

import dataclasses
import json
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclasses.dataclass(frozen=True, slots=True)
class Attachment:
    """A file selected for upload, held in memory."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size_bytes(self) -> int:
        """Size of the content in bytes."""
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path) -> Attachment:
        """Read a local file into an attachment.

        Args:
            path: Path to a local file.

        Returns:
            An ``Attachment`` with a guessed content type.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise ValueError(f"path: must point to an existing file, got {file_path}")
        mime_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            filename=file_path.name,
            content=file_path.read_bytes(),
            content_type=mime_type or "application/octet-stream",
        )


def _encode_field(value: Any) -> str:
    if isinstance(value, dict | list):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def generate_form_data(
    values: Mapping[str, Any],
) -> tuple[dict[str, str], dict[str, tuple[str, bytes, str]]]:
    """Split form values into multipart fields and file parts.

    Nested mappings and lists are serialized as JSON strings, ``Attachment``
    values become file parts, and everything else is sent as text.

    Args:
        values: Form field values keyed by field name.

    Returns:
        A ``(data, files)`` pair ready for an httpx request.
    """
    data: dict[str, str] = {}
    files: dict[str, tuple[str, bytes, str]] = {}
    for key, value in values.items():
        if isinstance(value, Attachment):
            files[key] = (value.filename, value.content, value.content_type)
        else:
            data[key] = _encode_field(value)
    return data, files


type MultipartPart = tuple[str | None, bytes] | tuple[str, bytes, str]


def multipart_parts(values: Mapping[str, Any]) -> dict[str, MultipartPart]:
    """Encode form values as multipart parts, text fields included.

    httpx falls back to a url-encoded body when no file part is present, so
    text fields become parts without a filename. The body is then
    ``multipart/form-data`` whether or not an attachment was chosen.

    Args:
        values: Form field values keyed by field name, in submission order.

    Returns:
        Parts keyed by field name, ready for the ``files`` argument of httpx.
    """
    data, files = generate_form_data(values)
    return {
        key: files[key] if key in files else (None, data[key].encode("utf-8"))
        for key in values
    }
