"""Pre-flight checks for uploaded images.

Rules run in a fixed order and the first failing rule wins:

1. MIME type must be in the accepted set (INVALID_FILE_TYPE)
2. Payload must not exceed the size ceiling (FILE_TOO_LARGE)
"""

from __future__ import annotations

from collections.abc import Iterable

from hive_detection.constants import ACCEPTED_IMAGE_TYPES, MAX_FILE_SIZE
from hive_detection.core.types import (
    ErrorKind,
    Failure,
    ImageFile,
    Result,
    Success,
)
from hive_detection.exceptions import ValidationError


class RequestValidator:
    """Rejects unsupported or oversized images before any network call."""

    def __init__(
        self,
        accepted_mime_types: Iterable[str] = ACCEPTED_IMAGE_TYPES,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        """Initialize the validator.

        Args:
            accepted_mime_types: MIME types accepted for upload (case-insensitive).
            max_file_size: Largest accepted payload in bytes.
        """
        self.accepted_mime_types = frozenset(m.lower() for m in accepted_mime_types)
        self.max_file_size = max_file_size

    def validate(self, image: ImageFile) -> Result[ImageFile, ValidationError]:
        """Check `image` against the rules, returning the image on success."""
        mime_type = _normalize_mime(image.mime_type)
        if mime_type not in self.accepted_mime_types:
            return Failure(
                ValidationError(
                    f"Invalid file type '{image.mime_type or 'unknown'}'. "
                    f"Supported types: {', '.join(sorted(self.accepted_mime_types))}.",
                    kind=ErrorKind.INVALID_FILE_TYPE,
                )
            )

        if image.size > self.max_file_size:
            return Failure(
                ValidationError(
                    f"File too large: {image.size / (1024**2):.1f}MB "
                    f"(max: {self.max_file_size / (1024**2):.1f}MB).",
                    kind=ErrorKind.FILE_TOO_LARGE,
                )
            )

        return Success(image)


def _normalize_mime(mime_type: str) -> str:
    """Lowercase and drop parameters such as '; charset=...'."""
    return mime_type.split(";", 1)[0].strip().lower()
