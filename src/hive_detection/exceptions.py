"""Exceptions raised inside the detection pipeline.

Every pipeline exception carries the `ErrorKind` it surfaces as, so the
service boundary can turn it into a `ServiceResult` without guessing.
"""

from __future__ import annotations

from hive_detection.core.types import ErrorKind


class DetectionError(Exception):
    """Base exception for detection pipeline errors."""

    kind: ErrorKind = ErrorKind.API_ERROR

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:  # noqa: D107
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class MissingKeyError(DetectionError):
    """Raised when no API key can be resolved before dispatch"""  # noqa: D415

    kind = ErrorKind.API_KEY_MISSING


class ValidationError(DetectionError):
    """Raised when an image is rejected before any network call.

    The kind is either `INVALID_FILE_TYPE` or `FILE_TOO_LARGE`, depending on
    which rule failed.
    """


class APIError(DetectionError):
    """Raised when the provider answered but reported a failure."""

    kind = ErrorKind.API_ERROR

    def __init__(self, message: str, *, status_code: int | None = None) -> None:  # noqa: D107
        super().__init__(message)
        self.status_code = status_code


class NetworkError(DetectionError):
    """Raised when the provider could not be reached at all"""  # noqa: D415

    kind = ErrorKind.NETWORK_ERROR


class ConfigurationError(Exception):
    """Raised when configuration values fail validation.

    This is a construction-time error and is never turned into a
    `ServiceResult`.
    """
