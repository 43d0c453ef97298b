"""Environment variable configuration loading.

This module handles loading configuration from HIVE_* environment variables,
including optional .env file support and type coercion through the schema.
"""

import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError

from .schema import FIELD_NAMES, DetectionSettings

ENV_VARS = {f"HIVE_{name.upper()}": name for name in FIELD_NAMES}


class EnvironmentConfigLoader:
    """Loads configuration from environment variables."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to a .env file. Its values are used only
                for variables that are not already set in the process
                environment.

        Returns:
            Dictionary of configuration values found in the environment.
            Only includes fields that are actually set (not defaults).

        Raises:
            FileNotFoundError: If `env_file` does not exist.
            ValueError: If environment variables contain invalid values.
        """
        source: dict[str, str] = {}
        if env_file:
            env_path = Path(env_file)
            if not env_path.exists():
                raise FileNotFoundError(f"Environment file not found: {env_path}")
            source.update(
                {k: v for k, v in dotenv_values(env_path).items() if v is not None}
            )
        source.update(os.environ)

        env_values = {
            field_name: source[env_var]
            for env_var, field_name in ENV_VARS.items()
            if env_var in source
        }
        if not env_values:
            return {}

        try:
            settings = DetectionSettings(**env_values)
        except ValidationError as e:
            env_var_list = [
                f"HIVE_{field_name.upper()}" for field_name in sorted(env_values)
            ]
            raise ValueError(
                f"Invalid environment variable values in {', '.join(env_var_list)}. "
                f"Error: {e}"
            ) from e

        return {field_name: getattr(settings, field_name) for field_name in env_values}

    def get_env_summary(self) -> dict[str, str]:
        """Summarize HIVE_* variables with the API key redacted."""
        return {
            env_var: "<redacted>" if "API_KEY" in env_var else os.environ[env_var]
            for env_var in ENV_VARS
            if env_var in os.environ
        }
