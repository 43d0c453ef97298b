"""Build provider request descriptors from validated inputs."""

from __future__ import annotations

from hive_detection.constants import SYNC_ENDPOINT
from hive_detection.core.types import AnalysisInput, ImageFile, ImageUrl, ProviderRequest


class RequestBuilder:
    """Turns an image or URL plus a key into a `ProviderRequest`.

    Files are sent as a multipart `media` part; URLs as a `url` form field.
    """

    def __init__(self, endpoint: str = SYNC_ENDPOINT) -> None:  # noqa: D107
        self.endpoint = endpoint

    def build(self, image: AnalysisInput, credential: str) -> ProviderRequest:  # noqa: D102
        headers = {
            "Authorization": f"Token {credential}",
            "Accept": "application/json",
        }
        if isinstance(image, ImageFile):
            return ProviderRequest(
                url=self.endpoint,
                headers=headers,
                files={"media": (image.filename, bytes(image.content), image.mime_type)},
            )
        if isinstance(image, ImageUrl):
            return ProviderRequest(
                url=self.endpoint, headers=headers, data={"url": image.url}
            )
        raise TypeError(f"Unsupported analysis input: {type(image).__name__}")
