"""End-to-end behavior of `DetectionService` against a mocked provider.

Each test drives the public entry points only and inspects what reached the
transport, so stage ordering is observable from the outside.
"""

import asyncio
import json

import httpx
import pytest

from hive_detection import (
    ErrorKind,
    JSONFileStore,
    MemoryStore,
    SimpleReporter,
    create_service,
)
from hive_detection.config import FrozenConfig
from hive_detection.constants import CREDENTIAL_STORE_KEY
from hive_detection.pipeline.error_classifier import MISSING_KEY_MESSAGE
from hive_detection.service import DetectionService
from tests.fixtures.api_responses import SAMPLE_RESPONSES, classes, hive_response
from tests.helpers import (
    RecordingTransport,
    failing_transport,
    jpeg,
    json_transport,
)

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


# --- Happy path ---


async def test_successful_file_analysis(make_service, ai_transport):
    service = make_service(ai_transport)

    result = await service.analyze_image(jpeg())

    assert result.success is True
    assert result.error is None
    assert result.data.confidence == pytest.approx(0.97)
    assert result.data.is_ai_generated is True
    assert result.data.analysis.model == "Hive AI"
    assert result.data.analysis.generator.name == "Midjourney"
    assert ai_transport.calls == 1
    sent = ai_transport.requests[0]
    assert sent.headers["Authorization"] == "Token test-api-key"
    assert sent.headers["Content-Type"].startswith("multipart/form-data")


async def test_successful_url_analysis(make_service):
    transport = json_transport(SAMPLE_RESPONSES["human_photo"])
    service = make_service(transport)

    result = await service.analyze_image_from_url("https://img.example.test/cat.jpg")

    assert result.success is True
    assert result.data.confidence == pytest.approx(0.04)
    assert result.data.is_ai_generated is False
    assert b"url=https%3A%2F%2Fimg.example.test%2Fcat.jpg" in transport.requests[0].content


async def test_request_goes_to_configured_endpoint(make_service, ai_transport):
    service = make_service(ai_transport, endpoint="https://hive.example.test/sync")

    await service.analyze_image(jpeg())

    assert str(ai_transport.requests[0].url) == "https://hive.example.test/sync"


# --- Validation happens before anything else ---


async def test_invalid_type_rejected_without_network_call(make_service, ai_transport):
    service = make_service(ai_transport)

    result = await service.analyze_image(jpeg(mime_type="application/pdf"))

    assert result.success is False
    assert result.error is ErrorKind.INVALID_FILE_TYPE
    assert result.data.confidence == 0.0
    assert ai_transport.calls == 0


async def test_oversized_file_rejected_without_network_call(make_service, ai_transport):
    service = make_service(ai_transport, max_file_size_bytes=1024)

    result = await service.analyze_image(jpeg(size=1025))

    assert result.error is ErrorKind.FILE_TOO_LARGE
    assert ai_transport.calls == 0


async def test_file_at_size_limit_is_accepted(make_service, ai_transport):
    service = make_service(ai_transport, max_file_size_bytes=1024)

    result = await service.analyze_image(jpeg(size=1024))

    assert result.success is True


async def test_validation_runs_before_credential_check(make_service, ai_transport):
    service = make_service(ai_transport, api_key=None)

    result = await service.analyze_image(jpeg(mime_type="text/plain"))

    assert result.error is ErrorKind.INVALID_FILE_TYPE


async def test_type_rule_wins_over_size_rule(make_service, ai_transport):
    service = make_service(ai_transport, max_file_size_bytes=10)

    result = await service.analyze_image(jpeg(size=100, mime_type="image/bmp"))

    assert result.error is ErrorKind.INVALID_FILE_TYPE


# --- Credentials ---


async def test_missing_key_fails_without_network_call(make_service, ai_transport):
    service = make_service(ai_transport, api_key=None)

    result = await service.analyze_image(jpeg())

    assert result.success is False
    assert result.error is ErrorKind.API_KEY_MISSING
    assert result.message == MISSING_KEY_MESSAGE
    assert result.hint == "Your API key is missing. Please add it in your settings."
    assert f"Error: {MISSING_KEY_MESSAGE}" in result.data.analysis.breakdown.details
    assert ai_transport.calls == 0


async def test_url_analysis_also_requires_key(make_service, ai_transport):
    service = make_service(ai_transport, api_key=None)

    result = await service.analyze_image_from_url("https://img.example.test/a.png")

    assert result.error is ErrorKind.API_KEY_MISSING
    assert ai_transport.calls == 0


async def test_runtime_key_is_used_and_persisted(make_service, ai_transport, store):
    service = make_service(ai_transport, api_key=None)

    service.set_api_key("  runtime-key  ")
    result = await service.analyze_image(jpeg())

    assert result.success is True
    assert ai_transport.requests[0].headers["Authorization"] == "Token runtime-key"
    assert store.get(CREDENTIAL_STORE_KEY) == "runtime-key"


async def test_runtime_key_overrides_configured_key(make_service, ai_transport):
    service = make_service(ai_transport, api_key="configured")

    service.set_api_key("override")
    await service.analyze_image(jpeg())

    assert ai_transport.requests[0].headers["Authorization"] == "Token override"


async def test_clearing_key_removes_persisted_value(make_service, store):
    service = make_service(api_key=None)
    service.set_api_key("temporary")
    assert service.has_api_key() is True

    service.set_api_key("")

    assert service.has_api_key() is False
    assert store.get(CREDENTIAL_STORE_KEY) is None


async def test_clearing_key_falls_back_to_configured(make_service):
    service = make_service(api_key="configured")
    service.set_api_key("override")

    service.set_api_key("   ")

    assert service.has_api_key() is True


async def test_persisted_key_is_picked_up_by_new_service(ai_transport):
    store = MemoryStore({CREDENTIAL_STORE_KEY: "stored-key"})
    service = DetectionService(
        FrozenConfig(min_request_interval=0.0), store=store, transport=ai_transport
    )

    result = await service.analyze_image(jpeg())

    assert result.success is True
    assert ai_transport.requests[0].headers["Authorization"] == "Token stored-key"


async def test_persistence_failure_keeps_session_key(ai_transport, caplog):
    class ReadOnlyStore(MemoryStore):
        def set(self, key, value):
            raise PermissionError("read-only")

    service = DetectionService(
        FrozenConfig(min_request_interval=0.0),
        store=ReadOnlyStore(),
        transport=ai_transport,
    )

    service.set_api_key("session-key")

    assert service.has_api_key() is True
    assert "Could not persist API key" in caplog.text


async def test_store_backend_errors_do_not_escape_set_api_key(ai_transport, caplog):
    class BrokenStore(MemoryStore):
        def set(self, key, value):
            raise RuntimeError("backend down")

    service = DetectionService(
        FrozenConfig(min_request_interval=0.0),
        store=BrokenStore(),
        transport=ai_transport,
    )

    service.set_api_key("session-key")
    result = await service.analyze_image(jpeg())

    assert result.success is True
    assert ai_transport.requests[0].headers["Authorization"] == "Token session-key"
    assert "backend down" in caplog.text


# --- Provider failures ---


@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
    ],
)
async def test_transport_failures_are_network_errors(make_service, exc):
    service = make_service(failing_transport(exc))

    result = await service.analyze_image(jpeg())

    assert result.success is False
    assert result.error is ErrorKind.NETWORK_ERROR
    assert result.data.analysis.model == "Error"


async def test_http_error_status_is_api_error(make_service):
    transport = json_transport({"error": {"message": "Invalid API key"}}, 401)
    service = make_service(transport)

    result = await service.analyze_image(jpeg())

    assert result.error is ErrorKind.API_ERROR
    assert result.message == "API Error: Invalid API key"
    assert result.data.analysis.breakdown.details[0] == "Error: API Error: Invalid API key"


async def test_provider_error_envelope_is_api_error(make_service):
    service = make_service(json_transport(SAMPLE_RESPONSES["provider_error"]))

    result = await service.analyze_image(jpeg())

    assert result.error is ErrorKind.API_ERROR
    assert result.message == "Hive API Error: Media could not be decoded"


async def test_non_json_body_is_api_error(make_service):
    transport = RecordingTransport(lambda _request: httpx.Response(200, text="<html>"))
    service = make_service(transport)

    result = await service.analyze_image(jpeg())

    assert result.error is ErrorKind.API_ERROR


async def test_unexpected_exception_is_contained(make_service):
    def _explode(_request):
        raise RuntimeError("handler bug")

    service = make_service(RecordingTransport(_explode))

    result = await service.analyze_image(jpeg())

    assert result.success is False
    assert result.error is ErrorKind.API_ERROR
    assert "handler bug" in result.message


@pytest.mark.parametrize("url", ["", "   "])
async def test_blank_url_is_api_error(make_service, ai_transport, url):
    service = make_service(ai_transport)

    result = await service.analyze_image_from_url(url)

    assert result.error is ErrorKind.API_ERROR
    assert ai_transport.calls == 0


@pytest.mark.parametrize("url", ["", "   ", "https://img.example.test/a.jpg"])
async def test_url_without_key_reports_missing_key(make_service, ai_transport, url):
    service = make_service(ai_transport, api_key=None)

    result = await service.analyze_image_from_url(url)

    assert result.error is ErrorKind.API_KEY_MISSING
    assert ai_transport.calls == 0


async def test_blank_url_does_not_take_a_rate_limit_slot(make_service, ai_transport):
    service = make_service(ai_transport, min_request_interval=60.0)

    await service.analyze_image_from_url("")
    result = await asyncio.wait_for(service.analyze_image(jpeg()), timeout=5)

    assert result.success is True


async def test_unsupported_input_type_is_contained(make_service, ai_transport):
    service = make_service(ai_transport)

    result = await service.analyze_image(b"raw bytes")  # type: ignore[arg-type]

    assert result.error is ErrorKind.API_ERROR
    assert ai_transport.calls == 0


# --- Normalization through the service ---


async def test_complement_of_not_ai_score(make_service):
    service = make_service(json_transport(SAMPLE_RESPONSES["not_ai_only"]))

    result = await service.analyze_image(jpeg())

    assert result.data.confidence == pytest.approx(0.2)
    assert result.data.is_ai_generated is False


async def test_empty_output_still_succeeds(make_service):
    service = make_service(json_transport(hive_response([])))

    result = await service.analyze_image(jpeg())

    assert result.success is True
    assert result.data.confidence == 0.0
    assert result.data.analysis.breakdown.details


async def test_result_serializes_to_json(make_service):
    service = make_service(json_transport(hive_response(classes(ai_generated=0.6))))

    payload = (await service.analyze_image(jpeg())).to_dict()

    assert json.loads(json.dumps(payload))["data"]["is_ai_generated"] is True


# --- Rate limiting ---


async def test_concurrent_calls_are_spaced(make_service, ai_transport):
    interval = 0.1
    service = make_service(ai_transport, min_request_interval=interval)

    results = await asyncio.gather(
        service.analyze_image(jpeg()),
        service.analyze_image(jpeg()),
        service.analyze_image_from_url("https://img.example.test/a.jpg"),
    )

    assert all(r.success for r in results)
    times = sorted(ai_transport.dispatch_times)
    gaps = [later - earlier for earlier, later in zip(times, times[1:], strict=False)]
    assert all(gap >= interval - 0.01 for gap in gaps)


async def test_rejected_requests_do_not_consume_a_slot(make_service, ai_transport):
    service = make_service(ai_transport, min_request_interval=60.0)

    await service.analyze_image(jpeg(mime_type="image/tiff"))
    result = await asyncio.wait_for(service.analyze_image(jpeg()), timeout=5)

    assert result.success is True


# --- Factory and descriptor ---


async def test_create_service_persists_key_to_json_file(tmp_path, ai_transport):
    path = tmp_path / "creds" / "hive.json"
    config = FrozenConfig(credential_store_path=str(path), min_request_interval=0.0)

    service = create_service(config, transport=ai_transport)
    service.set_api_key("file-key")

    assert json.loads(path.read_text()) == {CREDENTIAL_STORE_KEY: "file-key"}
    restarted = create_service(config, transport=ai_transport)
    assert restarted.has_api_key() is True
    assert isinstance(restarted.store, JSONFileStore)


async def test_create_service_reads_environment(monkeypatch, tmp_path, ai_transport):
    monkeypatch.setenv("HIVE_API_KEY", "env-key")
    monkeypatch.setenv("HIVE_MIN_REQUEST_INTERVAL", "0")
    monkeypatch.setenv("HIVE_CREDENTIAL_STORE_PATH", str(tmp_path / "c.json"))

    service = create_service(transport=ai_transport)
    result = await service.analyze_image(jpeg())

    assert result.success is True
    assert ai_transport.requests[0].headers["Authorization"] == "Token env-key"


async def test_service_info(make_service):
    info = make_service().get_service_info()

    assert info.name == "Hive AI Detection Service"
    assert info.version == "1.0.0"
    assert any("10MB" in capability for capability in info.capabilities)


async def test_telemetry_records_stages(monkeypatch, ai_transport):
    monkeypatch.setattr("hive_detection.telemetry._TELEMETRY_ENABLED", True)
    reporter = SimpleReporter()
    service = DetectionService(
        FrozenConfig(api_key="k", min_request_interval=0.0),
        transport=ai_transport,
        reporters=(reporter,),
    )

    await service.analyze_image(jpeg())
    await service.analyze_image(jpeg(mime_type="image/tiff"))

    assert {"detection.validate", "detection.send", "detection.normalize"} <= set(
        reporter.timings
    )
    assert reporter.metrics["detection.error"][0][1]["kind"] == "INVALID_FILE_TYPE"
