import httpx
import pytest

from hive_detection.core.types import ErrorKind
from hive_detection.exceptions import (
    APIError,
    MissingKeyError,
    NetworkError,
    ValidationError,
)
from hive_detection.pipeline.error_classifier import (
    ErrorClassifier,
    error_result,
    user_message,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("cause", "kind"),
    [
        (MissingKeyError("no key"), ErrorKind.API_KEY_MISSING),
        (ValidationError("bad", kind=ErrorKind.INVALID_FILE_TYPE), ErrorKind.INVALID_FILE_TYPE),
        (ValidationError("big", kind=ErrorKind.FILE_TOO_LARGE), ErrorKind.FILE_TOO_LARGE),
        (APIError("API Error: nope", status_code=500), ErrorKind.API_ERROR),
        (NetworkError("offline"), ErrorKind.NETWORK_ERROR),
        (httpx.ConnectError("refused"), ErrorKind.NETWORK_ERROR),
        (RuntimeError("boom"), ErrorKind.API_ERROR),
    ],
)
def test_every_cause_maps_to_one_kind(cause, kind):
    result = ErrorClassifier().to_service_result("send", cause)

    assert result.success is False
    assert result.error is kind
    assert result.message


def test_http_status_error_is_api_error():
    request = httpx.Request("POST", "https://example.test")
    response = httpx.Response(500, request=request)
    cause = httpx.HTTPStatusError("server error", request=request, response=response)

    kind, detail = ErrorClassifier().classify(cause)

    assert kind is ErrorKind.API_ERROR
    assert "500" in detail


def test_error_result_shape():
    data = ErrorClassifier().to_service_result("credential", MissingKeyError("No key")).data

    assert data.confidence == 0.0
    assert data.is_ai_generated is False
    assert data.analysis.model == "Error"
    assert data.analysis.breakdown.details == (
        "Error: No key",
        "Unable to analyze image",
        "Default safe result returned",
    )


def test_unexpected_errors_are_logged_with_traceback(caplog):
    try:
        raise KeyError("missing")
    except KeyError as e:
        cause = e

    result = ErrorClassifier().to_service_result("normalize", cause)

    assert result.error is ErrorKind.API_ERROR
    assert "Unexpected error" in result.message
    assert any(record.exc_info for record in caplog.records)


def test_user_message_for_every_kind():
    for kind in ErrorKind:
        assert user_message(kind)


def test_error_result_is_standalone():
    assert error_result("x").analysis.breakdown.details[0] == "Error: x"


@pytest.mark.parametrize(
    ("cause", "kind"),
    [
        (MissingKeyError("no key"), ErrorKind.API_KEY_MISSING),
        (NetworkError("offline"), ErrorKind.NETWORK_ERROR),
        (ValueError("bug"), ErrorKind.API_ERROR),
    ],
)
def test_failed_result_carries_user_facing_hint(cause, kind):
    result = ErrorClassifier().to_service_result("send", cause)

    assert result.hint == user_message(kind)
    assert result.hint != result.message
