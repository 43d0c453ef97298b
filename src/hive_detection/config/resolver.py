"""Configuration resolution with precedence handling.

This module implements the resolution algorithm that merges configuration
from multiple sources according to the documented precedence order:
Programmatic > Environment > Defaults
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from hive_detection.exceptions import ConfigurationError

from .env_loader import EnvironmentConfigLoader
from .schema import FIELD_NAMES, DetectionSettings
from .types import ConfigOrigin, ResolvedConfig


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        """Initialize the configuration resolver."""
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        use_env_file: str | Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence).
                Unknown fields are ignored.
            use_env_file: Optional .env file consulted for unset variables.

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ConfigurationError: If validation fails or an env file is missing.
        """
        origin: dict[str, ConfigOrigin] = {}
        merged_config: dict[str, Any] = {}

        # Step 1: Start with schema defaults
        for field in FIELD_NAMES:
            merged_config[field] = DetectionSettings.model_fields[field].get_default(
                call_default_factory=True
            )
            origin[field] = "default"

        # Step 2: Apply environment variables
        try:
            env_config = self.env_loader.load_env_config(env_file=use_env_file)
        except (ValueError, FileNotFoundError) as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e
        for field, value in env_config.items():
            merged_config[field] = value
            origin[field] = "env"

        # Step 3: Apply programmatic overrides (highest precedence)
        for field, value in (programmatic or {}).items():
            if field in merged_config:
                merged_config[field] = value
                origin[field] = "programmatic"

        # Step 4: Validate the final configuration using Pydantic
        try:
            final_config = DetectionSettings(**merged_config).to_dict()
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(**final_config, origin=origin)
