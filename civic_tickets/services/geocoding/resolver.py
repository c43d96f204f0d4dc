import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from civic_tickets.core.errors import GeocodeUnavailable
from civic_tickets.core.settings import settings
from .base import GeocodeAttemptError, GeocodingProvider
from .google_provider import GoogleMapsProvider
from .nominatim_provider import NominatimProvider
from .retry import FailureKind, RetryExhausted, RetryPolicy, attempt_with_policy

logger = logging.getLogger(__name__)

_provider_instance: Optional[GeocodingProvider] = None


def get_geocoding_provider() -> GeocodingProvider:
    """
    Resolve the active geocoding provider based on settings.

    Rules:
    - Default: Nominatim (no API key required).
    - If GEOCODING_PROVIDER='google' AND GOOGLE_MAPS_API_KEY is set: Google.
    - 'google' without a key falls back to Nominatim with a warning.
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    provider_name = (settings.GEOCODING_PROVIDER or "nominatim").lower()
    timeout = settings.GEOCODING_TIMEOUT_SECONDS

    if provider_name == "google":
        if settings.GOOGLE_MAPS_API_KEY:
            _provider_instance = GoogleMapsProvider(api_key=settings.GOOGLE_MAPS_API_KEY, timeout=timeout)
            logger.info("Geocoding provider initialized: google")
            return _provider_instance
        logger.warning("GEOCODING_PROVIDER=google but GOOGLE_MAPS_API_KEY is not set. Falling back to Nominatim.")

    _provider_instance = NominatimProvider(user_agent=settings.GEOCODING_USER_AGENT, timeout=timeout)
    logger.info("Geocoding provider initialized: nominatim")
    return _provider_instance


class GeocodeResolver:
    """
    Resolves coordinates to an address mapping, retrying under a RetryPolicy.

    Each provider call runs in the default executor and is abandoned once
    `timeout` elapses; an abandoned call still uses up an attempt.
    """

    def __init__(
        self,
        provider: GeocodingProvider,
        policy: Optional[RetryPolicy] = None,
        timeout: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.policy = policy or RetryPolicy()
        self.timeout = timeout
        self._sleep = sleep

    async def _attempt(self, latitude: float, longitude: float) -> Dict[str, str]:
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(None, self.provider.reverse_geocode, latitude, longitude)
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise GeocodeAttemptError(f"Geocode timed out after {self.timeout}s") from e

    async def resolve(self, latitude: float, longitude: float) -> Dict[str, str]:
        """
        Raises:
            GeocodeUnavailable: every attempt failed; carries the last error
        """

        def log_failure(attempt: int, kind: FailureKind, error: Exception) -> None:
            headline = "Geocode rate limited (429)" if kind is FailureKind.RATE_LIMITED else "Geocode attempt failed"
            logger.warning(
                f"{headline}: attempt={attempt} lat={latitude} lng={longitude} "
                f"status={getattr(error, 'status_code', None)} error={error}"
            )

        try:
            return await attempt_with_policy(
                lambda: self._attempt(latitude, longitude),
                self.policy,
                on_failure=log_failure,
                sleep=self._sleep,
            )
        except RetryExhausted as e:
            logger.error(
                f"Geocoding failed after {e.attempts} attempt(s): lat={latitude} lng={longitude} error={e.last_error}"
            )
            raise GeocodeUnavailable(e.last_error) from e.last_error
