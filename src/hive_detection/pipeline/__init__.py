"""Detection pipeline stages, leaves first.

validate -> credential check -> rate limit -> build -> send -> normalize,
with every failure routed through the `ErrorClassifier`.
"""

from .api_handler import ProviderClient
from .error_classifier import ErrorClassifier, error_result, user_message
from .normalizer import ResponseNormalizer, format_generator_name
from .rate_limiter import RateLimiter
from .request_builder import RequestBuilder
from .validation import RequestValidator

__all__ = [
    "ErrorClassifier",
    "ProviderClient",
    "RateLimiter",
    "RequestBuilder",
    "RequestValidator",
    "ResponseNormalizer",
    "error_result",
    "format_generator_name",
    "user_message",
]
