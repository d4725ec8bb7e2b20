"""Configuration resolution with precedence handling.

Precedence, highest first: Programmatic > Environment > Project file > Defaults
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from recordform.core.exceptions import ConfigurationError

from .loaders import EnvironmentConfigLoader, FileConfigLoader
from .schema import SETTINGS_FIELDS, RecordFormSettings
from .types import ConfigOrigin, ResolvedConfig


class ConfigResolver:
    """Merges configuration sources and validates the result."""

    def __init__(self) -> None:
        """Initialize the resolver with its source loaders."""
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        use_env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources.

        Args:
            programmatic: Overrides with the highest precedence; unknown
                fields are ignored.
            use_env_file: Optional ``.env`` file loaded before reading the
                environment.
            project_root: Directory to search for ``pyproject.toml``.

        Returns:
            ResolvedConfig with merged values and per-field origins.

        Raises:
            ConfigurationError: If a source is malformed or the merged values
                fail validation.
        """
        merged: dict[str, Any] = {}
        origins: dict[str, ConfigOrigin] = {}

        # Step 1: schema defaults (read from the field definitions so the
        # environment does not leak in here)
        for field in SETTINGS_FIELDS:
            merged[field] = RecordFormSettings.model_fields[field].default
            origins[field] = "default"

        def _apply(values: dict[str, Any], origin: ConfigOrigin) -> None:
            for field, value in values.items():
                if field in merged:  # Only override known fields
                    merged[field] = value
                    origins[field] = origin

        # Step 2: project file
        _apply(self.file_loader.load_project_config(project_root), "file")

        # Step 3: environment
        try:
            env_config = self.env_loader.load_env_config(env_file=use_env_file)
        except (ValueError, FileNotFoundError) as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e
        _apply(env_config, "env")

        # Step 4: programmatic overrides
        if programmatic:
            _apply(programmatic, "programmatic")

        # Step 5: validate the merged result
        try:
            validated = RecordFormSettings(**merged).to_dict()
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(
            **{field: validated[field] for field in SETTINGS_FIELDS},
            origin=origins,
        )
