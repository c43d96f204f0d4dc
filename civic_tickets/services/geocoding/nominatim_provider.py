import logging
from typing import Dict, Any

import requests

from .base import GeocodeAttemptError, GeocodingProvider, clean_address

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim reverse-geocoding provider.

    - No API key required.
    - Uses a strict timeout.
    - Includes a User-Agent header as required by Nominatim usage policy.
    - Returns the raw `address` object; raises GeocodeAttemptError on failure.
    """

    name = "nominatim"
    BASE_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(self, user_agent: str = "CivicReportingSystem/1.0", timeout: float = 5.0):
        self.user_agent = user_agent
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, str]:
        params = {
            "lat": latitude,
            "lon": longitude,
            "format": "json",
            "addressdetails": 1,
        }
        headers = {
            "User-Agent": self.user_agent,
        }
        try:
            resp = requests.get(self.BASE_URL, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise GeocodeAttemptError(f"Nominatim request failed: {e}") from e

        if resp.status_code != 200:
            raise GeocodeAttemptError(
                f"Nominatim reverse-geocode failed with status {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data: Dict[str, Any] = resp.json()
        except ValueError as e:
            raise GeocodeAttemptError("Nominatim returned a non-JSON body") from e

        address = data.get("address") if isinstance(data, dict) else None
        if not isinstance(address, dict) or not address:
            raise GeocodeAttemptError("Invalid geocode response")

        return clean_address(address)
