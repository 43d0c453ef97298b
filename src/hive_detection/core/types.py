"""Core data types that flow through the detection pipeline.

This module defines the immutable data structures that represent a request
and its outcome as they move through the stages. Inputs are validated in
`__post_init__`; results are plain frozen dataclasses that can be turned into
JSON-ready dictionaries for collaborators that render them.
"""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
import enum
import mimetypes
from pathlib import Path
import typing

# --- Minimal guard helpers (clarity > boilerplate) ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad for Robust Error Handling ---
# Stages return Success | Failure instead of raising, so the service only
# needs a single conversion point at its boundary.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful result in the pipeline."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failure in the pipeline, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]


class ErrorKind(enum.StrEnum):
    """The closed vocabulary of error kinds reported to callers."""

    API_KEY_MISSING = "API_KEY_MISSING"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"


# --- Inputs ---


@dataclasses.dataclass(frozen=True, slots=True)
class ImageFile:
    """A binary image payload with its declared MIME type."""

    content: bytes
    mime_type: str
    filename: str = "image"

    def __post_init__(self) -> None:
        """Validate field types; content rules are the validator's job."""
        _require(
            condition=isinstance(self.content, bytes | bytearray | memoryview),
            message="must be bytes-like",
            field_name="content",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.mime_type, str),
            message="must be a str",
            field_name="mime_type",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.filename, str) and self.filename.strip() != "",
            message="must be a non-empty str",
            field_name="filename",
        )

    @property
    def size(self) -> int:
        """Payload length in bytes."""
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> ImageFile:
        """Create an `ImageFile` from a local filesystem path.

        Args:
            path: Path to a local file.
            mime_type: Declared MIME type. Guessed from the extension when omitted.

        Returns:
            An `ImageFile` holding the file bytes.
        """
        file_path = Path(path)
        _require(
            condition=file_path.is_file(),
            message="path must point to an existing file",
            field_name="path",
        )
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(str(file_path))
            mime_type = guessed or "application/octet-stream"
        return cls(
            content=file_path.read_bytes(),
            mime_type=mime_type,
            filename=file_path.name,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ImageUrl:
    """A remote image reference; the provider fetches it itself."""

    url: str

    def __post_init__(self) -> None:  # noqa: D105
        _require(
            condition=isinstance(self.url, str) and self.url.strip() != "",
            message="cannot be empty string",
            field_name="url",
        )


AnalysisInput = ImageFile | ImageUrl


@dataclasses.dataclass(frozen=True, slots=True)
class ProviderRequest:
    """Descriptor of a single POST to the provider."""

    url: str
    headers: typing.Mapping[str, str]
    data: typing.Mapping[str, str] | None = None
    files: typing.Mapping[str, tuple[str, bytes, str]] | None = None

    def __repr__(self) -> str:
        """Representation without the Authorization header or payload bytes."""
        parts = sorted(self.files) if self.files else []
        return (
            f"ProviderRequest(url={self.url!r}, "
            f"data={dict(self.data) if self.data else None!r}, files={parts!r})"
        )


# --- Results ---


@dataclasses.dataclass(frozen=True, slots=True)
class GeneratorScore:
    """A classification signal attributed to a named image generator."""

    name: str
    slug: str
    score: float


@dataclasses.dataclass(frozen=True, slots=True)
class C2PAMetadata:
    """Content Credentials manifest fields."""

    claim_generator: str | None = None
    digital_source_type: str | None = None
    action: str | None = None
    software_agent: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class XMPMetadata:
    """IPTC/XMP provenance fields."""

    digital_source_file_type: str | None = None
    credit: str | None = None
    digital_source_type: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class EXIFMetadata:
    """Camera EXIF fields."""

    make: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class ImageMetadata:
    """Provenance tags the provider extracted from the image."""

    c2pa: C2PAMetadata | None = None
    xmp: XMPMetadata | None = None
    exif: EXIFMetadata | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class AnalysisBreakdown:
    """Per-signal detail behind a verdict.

    `details` is never empty so renderers always have something to show.
    """

    human_likelihood: float
    ai_artifacts: float
    details: tuple[str, ...]
    generators: tuple[GeneratorScore, ...] = ()

    def __post_init__(self) -> None:  # noqa: D105
        _require(
            condition=len(self.details) > 0,
            message="must contain at least one line",
            field_name="details",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class AnalysisDetails:  # noqa: D101
    model: str
    breakdown: AnalysisBreakdown
    timestamp: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))
    metadata: ImageMetadata | None = None
    generator: GeneratorScore | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Normalized verdict for a single image."""

    confidence: float
    is_ai_generated: bool
    analysis: AnalysisDetails

    def __post_init__(self) -> None:  # noqa: D105
        _require(
            condition=0.0 <= self.confidence <= 1.0,
            message=f"must be within [0, 1], got {self.confidence!r}",
            field_name="confidence",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ServiceResult:
    """Uniform envelope returned by every public entry point.

    `data` is always populated; on failure it holds an error-shaped
    `AnalysisResult`. `error` is set exactly when `success` is False.
    `message` is the technical detail; `hint` is a fixed sentence for the
    error kind that can be shown to end users.
    """

    success: bool
    data: AnalysisResult
    error: ErrorKind | None = None
    message: str | None = None
    hint: str | None = None

    def __post_init__(self) -> None:  # noqa: D105
        _require(
            condition=self.success == (self.error is None),
            message="error must be set exactly when success is False",
            field_name="error",
        )

    def to_dict(self) -> dict[str, typing.Any]:
        """Return a JSON-ready dictionary."""
        return _to_plain(dataclasses.asdict(self))


@dataclasses.dataclass(frozen=True, slots=True)
class ServiceInfo:  # noqa: D101
    name: str
    version: str
    capabilities: tuple[str, ...]


def _to_plain(value: typing.Any) -> typing.Any:
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_to_plain(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value
