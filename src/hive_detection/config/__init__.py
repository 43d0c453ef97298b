"""Configuration management for the detection client.

Key components:
- DetectionSettings: Pydantic schema for HIVE_* settings
- ResolvedConfig: Post-resolution configuration with audit metadata
- FrozenConfig: Immutable configuration for the service
"""

from pathlib import Path
from typing import Any

from .resolver import ConfigResolver
from .schema import DetectionSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > Defaults.

    Example:
        config = resolve_config({"min_request_interval": 2.0})
        service = DetectionService(config.to_frozen())
    """
    return _resolver.resolve(programmatic, use_env_file=use_env_file)


__all__ = [
    "ConfigOrigin",
    "ConfigResolver",
    "DetectionSettings",
    "FrozenConfig",
    "ResolvedConfig",
    "SourceMap",
    "resolve_config",
]
