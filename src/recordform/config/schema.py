"""Configuration schema and validation using Pydantic.

Validates and coerces configuration values from every source (environment,
files, programmatic) into the correct types, with defaults.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recordform.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_RECORD_ID,
    DEFAULT_RECORDS_PATH,
    NETWORK_TIMEOUT,
    NOTIFICATION_DURATION,
    UPLOAD_CHUNK_SIZE,
)


class RecordFormSettings(BaseSettings):
    """Pydantic settings schema for the record form client.

    Environment variables use the ``RECORDFORM_`` prefix, e.g.
    ``RECORDFORM_BASE_URL``.
    """

    model_config = SettingsConfigDict(
        env_prefix="RECORDFORM_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the records API",
        min_length=1,
    )

    records_path: str = Field(
        default=DEFAULT_RECORDS_PATH,
        description="Collection path under the base URL",
        min_length=1,
    )

    record_id: int = Field(
        default=DEFAULT_RECORD_ID,
        description="Identifier of the record being edited",
        ge=0,
    )

    request_timeout: float = Field(
        default=NETWORK_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )

    upload_chunk_size: int = Field(
        default=UPLOAD_CHUNK_SIZE,
        description="Chunk size in bytes for progress-reporting uploads",
        ge=1,
    )

    notification_duration: float = Field(
        default=NOTIFICATION_DURATION,
        description="How long notifications stay visible, in seconds",
        ge=0,
    )

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended with '/'."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @field_validator("records_path", mode="after")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Store the collection path without surrounding slashes."""
        stripped = v.strip("/")
        if not stripped:
            raise ValueError("records_path must not be empty")
        return stripped

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary of field values."""
        return self.model_dump()


# Field names in display order
SETTINGS_FIELDS: tuple[str, ...] = tuple(RecordFormSettings.model_fields)
