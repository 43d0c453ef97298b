"""
Global test configuration.
"""

from collections.abc import Callable
import logging
import os
from typing import Any

import httpx
import pytest

from hive_detection.config import FrozenConfig
from hive_detection.service import DetectionService
from hive_detection.storage import MemoryStore
from tests.fixtures.api_responses import SAMPLE_RESPONSES
from tests.helpers import RecordingTransport, json_transport


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_hive_env(request, monkeypatch):
    """Ensure a clean HIVE_* environment for each test.

    Escape hatch: mark a test with @pytest.mark.allow_env_pollution to keep
    the current environment unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("HIVE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)


# --- Service Fixtures ---
@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def make_service(store) -> Callable[..., DetectionService]:
    """Build a service wired to a mock transport.

    Usage:
        service = make_service(transport, api_key="k", min_request_interval=0.5)
    """

    def _make(
        transport: httpx.AsyncBaseTransport | None = None,
        **config: Any,
    ) -> DetectionService:
        config.setdefault("api_key", "test-api-key")
        config.setdefault("min_request_interval", 0.0)
        return DetectionService(
            FrozenConfig(**config),
            store=store,
            transport=transport or json_transport(SAMPLE_RESPONSES["ai_midjourney"]),
        )

    return _make


@pytest.fixture
def ai_transport() -> RecordingTransport:
    return json_transport(SAMPLE_RESPONSES["ai_midjourney"])


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
