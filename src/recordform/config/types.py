"""Core configuration data types.

Configuration is resolved once, then frozen: ``ResolvedConfig`` carries the
merged values plus where each came from, ``FrozenConfig`` is what the rest of
the package receives.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]


class ResolvedConfig(NamedTuple):
    """Configuration after merging all sources, with audit metadata."""

    base_url: str
    records_path: str
    record_id: int
    request_timeout: float
    upload_chunk_size: int
    notification_duration: float

    # Tracks where each field value came from
    origin: SourceMap

    def to_frozen(self) -> "FrozenConfig":
        """Drop audit metadata and return the immutable runtime config."""
        return FrozenConfig(
            base_url=self.base_url,
            records_path=self.records_path,
            record_id=self.record_id,
            request_timeout=self.request_timeout,
            upload_chunk_size=self.upload_chunk_size,
            notification_duration=self.notification_duration,
        )

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Return a copy with programmatic overrides applied.

        Unknown fields are ignored.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)
        for field, value in overrides.items():
            if field in new_values and field != "origin":
                new_values[field] = value
                new_origin[field] = "programmatic"
        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Return one ``field: origin:value`` line per field."""
        lines = []
        for field in self._fields:
            if field == "origin" or field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if origin == "env":
                lines.append(f"{field}: env:RECORDFORM_{field.upper()}={value}")
            else:
                lines.append(f"{field}: {origin}:{value}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration used at runtime."""

    base_url: str
    records_path: str
    record_id: int
    request_timeout: float
    upload_chunk_size: int
    notification_duration: float

    @property
    def record_url(self) -> str:
        """Absolute URL of the record being edited."""
        return f"{self.base_url}/{self.records_path}/{self.record_id}"
