"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from the environment and programmatic overrides into the correct types
with proper defaults.
"""

import json
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from hive_detection.constants import (
    ACCEPTED_IMAGE_TYPES,
    DEFAULT_CREDENTIAL_STORE_PATH,
    MAX_FILE_SIZE,
    MIN_REQUEST_INTERVAL,
    NETWORK_TIMEOUT,
    SYNC_ENDPOINT,
)

FIELD_NAMES = (
    "api_key",
    "endpoint",
    "accepted_mime_types",
    "max_file_size_bytes",
    "min_request_interval",
    "timeout_seconds",
    "credential_store_path",
)


class DetectionSettings(BaseSettings):
    """Pydantic settings schema for the detection client.

    This handles validation, type coercion, and default values for all
    configuration fields. It integrates with environment variables using
    the HIVE_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="HIVE_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Hive AI API key configured at deploy time",
    )

    endpoint: str = Field(
        default=SYNC_ENDPOINT,
        description="Synchronous classification endpoint",
        min_length=1,
    )

    accepted_mime_types: Annotated[tuple[str, ...], NoDecode] = Field(
        default=ACCEPTED_IMAGE_TYPES,
        description="MIME types accepted for file uploads",
        min_length=1,
    )

    max_file_size_bytes: int = Field(
        default=MAX_FILE_SIZE,
        description="Largest accepted upload in bytes",
        gt=0,
    )

    min_request_interval: float = Field(
        default=MIN_REQUEST_INTERVAL,
        description="Minimum seconds between two dispatches",
        ge=0,
    )

    timeout_seconds: float = Field(
        default=NETWORK_TIMEOUT,
        description="Transport timeout for one provider call",
        gt=0,
    )

    credential_store_path: str = Field(
        default=DEFAULT_CREDENTIAL_STORE_PATH,
        description="JSON file holding the persisted user API key",
        min_length=1,
    )

    # --- Validation Rules ---

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, v: Any) -> Any:
        """Treat empty or whitespace-only keys as unset."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("accepted_mime_types", mode="before")
    @classmethod
    def parse_mime_types(cls, v: Any) -> Any:
        """Accept a JSON array or a comma-separated string."""
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("["):
                try:
                    v = json.loads(text)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid MIME type list: {v}") from e
            else:
                v = text.split(",")
        if isinstance(v, list | tuple):
            return tuple(str(item).strip().lower() for item in v if str(item).strip())
        return v

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary keyed by field name."""
        return {name: getattr(self, name) for name in FIELD_NAMES}
