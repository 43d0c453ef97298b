"""Convert every failure path into a `ServiceResult`.

Callers always receive a renderable `AnalysisResult`, so error results carry
a zero-confidence placeholder with a descriptive details list.
"""

from __future__ import annotations

import logging

import httpx

from hive_detection.constants import ERROR_MODEL_NAME
from hive_detection.core.types import (
    AnalysisBreakdown,
    AnalysisDetails,
    AnalysisResult,
    ErrorKind,
    ServiceResult,
)
from hive_detection.exceptions import DetectionError

log = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "No API key configured. Please set your Hive AI API key in settings."

_USER_MESSAGES = {
    ErrorKind.API_KEY_MISSING: "Your API key is missing. Please add it in your settings.",
    ErrorKind.INVALID_FILE_TYPE: "This file type is not supported. Please use JPEG, PNG, GIF, or WebP images.",
    ErrorKind.FILE_TOO_LARGE: "This file is too large. Please choose a smaller image.",
    ErrorKind.API_ERROR: "The detection service reported a problem. Please try again later.",
    ErrorKind.NETWORK_ERROR: "Unable to connect to the detection service. Please check your internet connection and try again.",
}


def user_message(kind: ErrorKind) -> str:
    """Fixed user-facing sentence for an error kind."""
    return _USER_MESSAGES[kind]


def error_result(detail: str) -> AnalysisResult:
    """Zero-confidence placeholder result describing a failure."""
    return AnalysisResult(
        confidence=0.0,
        is_ai_generated=False,
        analysis=AnalysisDetails(
            model=ERROR_MODEL_NAME,
            breakdown=AnalysisBreakdown(
                human_likelihood=1.0,
                ai_artifacts=0.0,
                details=(
                    f"Error: {detail}",
                    "Unable to analyze image",
                    "Default safe result returned",
                ),
            ),
        ),
    )


class ErrorClassifier:
    """Maps exceptions from any stage onto the fixed error vocabulary."""

    def classify(self, cause: BaseException) -> tuple[ErrorKind, str]:
        """Return the error kind and detail string for `cause`."""
        if isinstance(cause, DetectionError):
            return cause.kind, str(cause) or cause.kind.value
        if isinstance(cause, httpx.TransportError):
            return (
                ErrorKind.NETWORK_ERROR,
                "Network error. Please check your internet connection.",
            )
        if isinstance(cause, httpx.HTTPStatusError):
            return (
                ErrorKind.API_ERROR,
                f"API Error: HTTP {cause.response.status_code}",
            )
        return ErrorKind.API_ERROR, f"Unexpected error: {str(cause) or type(cause).__name__}"

    def to_service_result(self, stage: str, cause: BaseException) -> ServiceResult:
        """Build the failed `ServiceResult` for `cause` raised during `stage`."""
        kind, detail = self.classify(cause)
        if isinstance(cause, DetectionError | httpx.HTTPError):
            log.info("Detection failed at %s: %s (%s)", stage, kind, detail)
        else:
            log.error(
                "Unexpected failure at %s: %s",
                stage,
                cause,
                exc_info=(type(cause), cause, cause.__traceback__),
            )
        return ServiceResult(
            success=False,
            data=error_result(detail),
            error=kind,
            message=detail,
            hint=user_message(kind),
        )
