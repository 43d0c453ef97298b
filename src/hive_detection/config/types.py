"""Core configuration data types.

Configuration follows a resolve-once, freeze-then-flow pattern: sources are
merged into a `ResolvedConfig` that remembers where each value came from,
then frozen into the `FrozenConfig` the service consumes.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from hive_detection.constants import (
    ACCEPTED_IMAGE_TYPES,
    DEFAULT_CREDENTIAL_STORE_PATH,
    MAX_FILE_SIZE,
    MIN_REQUEST_INTERVAL,
    NETWORK_TIMEOUT,
    SYNC_ENDPOINT,
)

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "default"]
SourceMap = Mapping[str, ConfigOrigin]


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing."""

    api_key: str | None
    endpoint: str
    accepted_mime_types: tuple[str, ...]
    max_file_size_bytes: int
    min_request_interval: float
    timeout_seconds: float
    credential_store_path: str

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"ResolvedConfig(api_key={api_key_display!r}, endpoint={self.endpoint!r}, "
            f"accepted_mime_types={self.accepted_mime_types!r}, "
            f"max_file_size_bytes={self.max_file_size_bytes!r}, "
            f"min_request_interval={self.min_request_interval!r}, "
            f"timeout_seconds={self.timeout_seconds!r}, "
            f"credential_store_path={self.credential_store_path!r}, "
            f"origin={dict(self.origin)!r})"
        )

    def __repr__(self) -> str:
        """Repr with redacted API key for safe debugging."""
        return self.__str__()

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by the service."""
        return FrozenConfig(
            api_key=self.api_key,
            endpoint=self.endpoint,
            accepted_mime_types=self.accepted_mime_types,
            max_file_size_bytes=self.max_file_size_bytes,
            min_request_interval=self.min_request_interval,
            timeout_seconds=self.timeout_seconds,
            credential_store_path=self.credential_store_path,
        )

    def audit(self) -> str:
        """Generate a redacted report showing the origin of each field."""
        lines = []
        for field in self._fields:
            if field == "origin" or field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if field == "api_key":
                value_display = "None" if value is None else "<redacted>"
            elif origin == "env":
                value_display = f"HIVE_{field.upper()}={value}"
            else:
                value_display = str(value)
            lines.append(f"{field}: {origin}:{value_display}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to the detection service.

    Any attempt to modify this object will raise an exception.
    """

    api_key: str | None = None
    endpoint: str = SYNC_ENDPOINT
    accepted_mime_types: tuple[str, ...] = ACCEPTED_IMAGE_TYPES
    max_file_size_bytes: int = MAX_FILE_SIZE
    min_request_interval: float = MIN_REQUEST_INTERVAL
    timeout_seconds: float = NETWORK_TIMEOUT
    credential_store_path: str = DEFAULT_CREDENTIAL_STORE_PATH

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, endpoint={self.endpoint!r}, "
            f"max_file_size_bytes={self.max_file_size_bytes!r}, "
            f"min_request_interval={self.min_request_interval!r}, "
            f"timeout_seconds={self.timeout_seconds!r})"
        )

    def __repr__(self) -> str:
        """Representation with redacted API key for safe debugging."""
        return self.__str__()
