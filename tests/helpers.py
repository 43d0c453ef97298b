"""Shared helpers for driving the service against a mocked provider."""

from collections.abc import Callable
import json
import time
from typing import Any

import httpx

from hive_detection.core.types import ImageFile

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


def jpeg(size: int | None = None, mime_type: str = "image/jpeg") -> ImageFile:
    """A small image payload, optionally padded to `size` bytes."""
    content = JPEG_BYTES if size is None else b"\x00" * size
    return ImageFile(content=content, mime_type=mime_type, filename="photo.jpg")


class RecordingTransport(httpx.MockTransport):
    """`httpx.MockTransport` that remembers requests and their dispatch times."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self.dispatch_times: list[float] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            self.dispatch_times.append(time.monotonic())
            return handler(request)

        super().__init__(_record)

    @property
    def calls(self) -> int:
        return len(self.requests)


def json_transport(payload: Any, status_code: int = 200) -> RecordingTransport:
    """Transport that always answers with `payload` as JSON."""
    return RecordingTransport(
        lambda _request: httpx.Response(status_code, content=json.dumps(payload).encode())
    )


def failing_transport(exc: Exception) -> RecordingTransport:
    """Transport whose every request raises `exc`."""

    def _raise(_request: httpx.Request) -> httpx.Response:
        raise exc

    return RecordingTransport(_raise)
