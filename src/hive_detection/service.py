"""The primary user-facing entry point for image analysis.

`DetectionService` runs each request through the stages in order::

    validate -> credential check -> rate limit -> build -> send -> normalize

Stages report failures as values; the service converts every failure, and any
stray exception, into a `ServiceResult` at its boundary. Nothing raises past
the public methods.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hive_detection.config import FrozenConfig, resolve_config
from hive_detection.constants import (
    SERVICE_CAPABILITIES,
    SERVICE_NAME,
    SERVICE_VERSION,
)
from hive_detection.core.types import (
    AnalysisInput,
    Failure,
    ImageFile,
    ImageUrl,
    ServiceInfo,
    ServiceResult,
)
from hive_detection.credentials import CredentialResolver
from hive_detection.exceptions import MissingKeyError
from hive_detection.pipeline.api_handler import ProviderClient
from hive_detection.pipeline.error_classifier import MISSING_KEY_MESSAGE, ErrorClassifier
from hive_detection.pipeline.normalizer import ResponseNormalizer
from hive_detection.pipeline.rate_limiter import RateLimiter
from hive_detection.pipeline.request_builder import RequestBuilder
from hive_detection.pipeline.validation import RequestValidator
from hive_detection.storage import JSONFileStore, KeyValueStore, MemoryStore
from hive_detection.telemetry import TelemetryContext, TelemetryReporter

if TYPE_CHECKING:
    import httpx

log = logging.getLogger(__name__)


class DetectionService:
    """Client for the provider's image-authenticity classification endpoint.

    One instance is safe to share between concurrent tasks on one event
    loop. The only shared mutable state is the rate limiter's last-dispatch
    time and the credential store. Create a new service for each
    `asyncio.run()`.
    """

    def __init__(
        self,
        config: FrozenConfig | None = None,
        *,
        store: KeyValueStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        rate_limiter: RateLimiter | None = None,
        reporters: tuple[TelemetryReporter, ...] = (),
    ) -> None:
        """Initialize the service.

        Args:
            config: Frozen configuration. Defaults to `FrozenConfig()`.
            store: Persistence for the user-supplied key. Defaults to an
                in-memory store.
            transport: Optional `httpx` transport for the provider client.
            rate_limiter: Optional limiter; one is built from the config otherwise.
            reporters: Telemetry reporters, used only when telemetry is enabled.
        """
        self.config = config if config is not None else FrozenConfig()
        self.store = store if store is not None else MemoryStore()
        self._credentials = CredentialResolver.default(self.config.api_key, self.store)
        self._validator = RequestValidator(
            self.config.accepted_mime_types, self.config.max_file_size_bytes
        )
        self._rate_limiter = rate_limiter or RateLimiter(self.config.min_request_interval)
        self._builder = RequestBuilder(self.config.endpoint)
        self._client = ProviderClient(self.config.timeout_seconds, transport=transport)
        self._normalizer = ResponseNormalizer()
        self._classifier = ErrorClassifier()
        self._telemetry = TelemetryContext(*reporters)

    # --- Credentials ---

    def set_api_key(self, token: str) -> None:
        """Set (and persist) the API key; an empty string clears it.

        If the store cannot be written, the key still applies to this session.
        """
        try:
            self._credentials.set_credential(token)
        except Exception as e:
            log.warning("Could not persist API key: %s", e, exc_info=True)

    def has_api_key(self) -> bool:  # noqa: D102
        return self._credentials.has_credential()

    # --- Analysis ---

    async def analyze_image(self, image: ImageFile) -> ServiceResult:
        """Analyze an uploaded image.

        Type and size are validated before the key is checked or any
        network call is made.
        """
        if not isinstance(image, ImageFile):
            return self._fail(
                "validate",
                TypeError(f"Unsupported analysis input: {type(image).__name__}"),
            )
        return await self._run(image)

    async def analyze_image_from_url(self, url: str) -> ServiceResult:
        """Analyze a publicly reachable image URL; the provider fetches it.

        The key is checked before the URL itself.
        """
        return await self._run(url)

    def get_service_info(self) -> ServiceInfo:
        """Static descriptor of this client."""
        return ServiceInfo(
            name=SERVICE_NAME,
            version=SERVICE_VERSION,
            capabilities=SERVICE_CAPABILITIES,
        )

    async def _run(self, source: ImageFile | str) -> ServiceResult:
        ctx = self._telemetry
        stage = "validate"
        try:
            if isinstance(source, ImageFile):
                with ctx("detection.validate"):
                    checked = self._validator.validate(source)
                if isinstance(checked, Failure):
                    return self._fail(stage, checked.error)

            stage = "credential"
            credential = self._credentials.resolve()
            if credential is None:
                return self._fail(stage, MissingKeyError(MISSING_KEY_MESSAGE))

            # Checked before the limiter so a bad URL never takes a slot
            stage = "build"
            image: AnalysisInput = (
                source if isinstance(source, ImageFile) else ImageUrl(source)
            )

            stage = "rate_limit"
            with ctx("detection.rate_limit"):
                await self._rate_limiter.acquire()

            stage = "build"
            request = self._builder.build(image, credential)

            stage = "send"
            log.debug("Dispatching %r", request)
            with ctx("detection.send"):
                sent = await self._client.send(request)
            if isinstance(sent, Failure):
                return self._fail(stage, sent.error)

            stage = "normalize"
            with ctx("detection.normalize"):
                data = self._normalizer.normalize(sent.value)
            return ServiceResult(success=True, data=data)
        except Exception as e:
            return self._fail(stage, e)

    def _fail(self, stage: str, cause: BaseException) -> ServiceResult:
        result = self._classifier.to_service_result(stage, cause)
        self._telemetry.count("detection.error", kind=str(result.error), stage=stage)
        return result


def create_service(
    config: FrozenConfig | None = None,
    *,
    store: KeyValueStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    reporters: tuple[TelemetryReporter, ...] = (),
) -> DetectionService:
    """Create a service, resolving ambient configuration when none is given.

    Unless a store is supplied, the user-supplied key is persisted in a JSON
    file at `config.credential_store_path`.

    Raises:
        ConfigurationError: If environment configuration is invalid.
    """
    final_config = config if config is not None else resolve_config().to_frozen()
    final_store = (
        store if store is not None else JSONFileStore(final_config.credential_store_path)
    )
    return DetectionService(
        final_config, store=final_store, transport=transport, reporters=reporters
    )
