"""Configuration sources: ``pyproject.toml`` and the environment."""

import os
from pathlib import Path
import tomllib
from typing import Any

from dotenv import load_dotenv

from recordform.core.exceptions import ConfigurationError

from .schema import SETTINGS_FIELDS, RecordFormSettings

ENV_PREFIX = "RECORDFORM_"


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file exists but cannot be used."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with the offending file, a message and an optional cause."""
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads the ``[tool.recordform]`` table from ``pyproject.toml``."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Load configuration from the nearest ``pyproject.toml``.

        Args:
            project_root: Directory to start searching from; defaults to the
                current directory. Parents are searched too.

        Returns:
            The ``[tool.recordform]`` table, or an empty dict.

        Raises:
            ConfigFileError: If the file exists but is not valid TOML or the
                table is not a table.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if pyproject_path is None:
            return {}
        try:
            with pyproject_path.open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(
                pyproject_path, f"Failed to parse TOML: {e}", cause=e
            ) from e

        section = data.get("tool", {}).get("recordform", {})
        if not isinstance(section, dict):
            raise ConfigFileError(pyproject_path, "[tool.recordform] must be a table")
        return dict(section)

    def _find_pyproject_toml(self, start: Path | None) -> Path | None:
        current = (start or Path.cwd()).resolve()
        for directory in (current, *current.parents):
            candidate = directory / "pyproject.toml"
            if candidate.is_file():
                return candidate
        return None


class EnvironmentConfigLoader:
    """Loads ``RECORDFORM_*`` environment variables."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Load configuration from the environment.

        Args:
            env_file: Optional ``.env`` file loaded first. Variables already
                set in the environment are not overridden.

        Returns:
            Coerced values for the fields actually set in the environment.

        Raises:
            FileNotFoundError: If ``env_file`` does not exist.
            ValueError: If a variable holds an invalid value.
        """
        if env_file:
            env_path = Path(env_file)
            if not env_path.is_file():
                raise FileNotFoundError(f"Environment file not found: {env_path}")
            load_dotenv(env_path, override=False)

        env_values = {
            field: os.environ[f"{ENV_PREFIX}{field.upper()}"]
            for field in SETTINGS_FIELDS
            if f"{ENV_PREFIX}{field.upper()}" in os.environ
        }
        if not env_values:
            return {}

        try:
            settings = RecordFormSettings(**env_values)
        except ValueError as e:
            names = ", ".join(f"{ENV_PREFIX}{f.upper()}" for f in env_values)
            raise ValueError(f"Invalid environment variable values: {names}. {e}") from e
        return {field: getattr(settings, field) for field in env_values}
