"""Configuration management for the record form client.

Resolve once, freeze, then pass the ``FrozenConfig`` around:

    config = resolve_config({"base_url": "https://api.example.com"}).to_frozen()

``config_scope()`` makes ``resolve_config()`` return a given configuration
for the duration of a block, e.g. in tests.
"""

from collections.abc import Generator
from contextlib import contextmanager
import contextvars
from pathlib import Path
from typing import Any

from .loaders import ConfigFileError, EnvironmentConfigLoader, FileConfigLoader
from .resolver import ConfigResolver
from .schema import RecordFormSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

_resolver = ConfigResolver()

_ambient_resolved_config: contextvars.ContextVar[ResolvedConfig] = (
    contextvars.ContextVar("recordform_resolved_config")
)


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Inside a ``config_scope`` the scoped configuration is used as the base and
    only ``programmatic`` overrides are applied on top of it.

    Raises:
        ConfigurationError: If any source is malformed or validation fails.
    """
    try:
        ambient = _ambient_resolved_config.get()
    except LookupError:
        return _resolver.resolve(
            programmatic=programmatic,
            use_env_file=use_env_file,
            project_root=project_root,
        )
    return ambient.with_overrides(**programmatic) if programmatic else ambient


@contextmanager
def config_scope(config: ResolvedConfig) -> Generator[None]:
    """Temporarily make ``resolve_config()`` return ``config``.

    Only affects resolution; a ``FrozenConfig`` already handed out does not
    change.
    """
    token = _ambient_resolved_config.set(config)
    try:
        yield
    finally:
        _ambient_resolved_config.reset(token)


__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "ConfigResolver",
    "EnvironmentConfigLoader",
    "FileConfigLoader",
    "FrozenConfig",
    "RecordFormSettings",
    "ResolvedConfig",
    "SourceMap",
    "config_scope",
    "resolve_config",
]
