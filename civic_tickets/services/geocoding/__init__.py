"""
Reverse geocoding: providers, retry policy and the retrying resolver.
"""

from .base import GeocodeAttemptError, GeocodingProvider
from .resolver import GeocodeResolver, get_geocoding_provider
from .retry import FailureKind, RetryExhausted, RetryPolicy, attempt_with_policy

__all__ = [
    "GeocodeAttemptError",
    "GeocodingProvider",
    "GeocodeResolver",
    "get_geocoding_provider",
    "FailureKind",
    "RetryExhausted",
    "RetryPolicy",
    "attempt_with_policy",
]
