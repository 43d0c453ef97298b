"""Async client for the Hive AI image-authenticity detection API."""

import importlib.metadata
import logging

from hive_detection.config import FrozenConfig, ResolvedConfig, resolve_config
from hive_detection.core.types import (
    AnalysisBreakdown,
    AnalysisDetails,
    AnalysisResult,
    ErrorKind,
    GeneratorScore,
    ImageFile,
    ImageMetadata,
    ImageUrl,
    ServiceInfo,
    ServiceResult,
)
from hive_detection.exceptions import (
    APIError,
    ConfigurationError,
    DetectionError,
    MissingKeyError,
    NetworkError,
    ValidationError,
)
from hive_detection.service import DetectionService, create_service
from hive_detection.storage import JSONFileStore, KeyValueStore, MemoryStore
from hive_detection.telemetry import SimpleReporter, TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("hive-detection")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Service
    "DetectionService",
    "create_service",
    # Configuration
    "FrozenConfig",
    "ResolvedConfig",
    "resolve_config",
    # Persistence
    "KeyValueStore",
    "MemoryStore",
    "JSONFileStore",
    # Core Types
    "ImageFile",
    "ImageUrl",
    "AnalysisResult",
    "AnalysisDetails",
    "AnalysisBreakdown",
    "GeneratorScore",
    "ImageMetadata",
    "ServiceResult",
    "ServiceInfo",
    "ErrorKind",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    "SimpleReporter",
    # Exceptions
    "DetectionError",
    "MissingKeyError",
    "ValidationError",
    "APIError",
    "NetworkError",
    "ConfigurationError",
]
