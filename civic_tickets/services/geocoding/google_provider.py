import logging
from typing import Dict, Any, List, Optional

import requests

from .base import GeocodeAttemptError, GeocodingProvider, clean_address

logger = logging.getLogger(__name__)

# Google address component type -> OpenStreetMap address field
_COMPONENT_FIELDS = [
    ("sublocality_level_1", "suburb"),
    ("sublocality", "suburb"),
    ("neighborhood", "neighbourhood"),
    ("locality", "city"),
    ("postal_town", "town"),
    ("administrative_area_level_3", "county"),
    ("administrative_area_level_2", "state_district"),
    ("administrative_area_level_1", "state"),
    ("route", "road"),
    ("postal_code", "postcode"),
    ("country", "country"),
]


class GoogleMapsProvider(GeocodingProvider):
    """
    Google Maps reverse-geocoding provider.

    - Used only when GEOCODING_PROVIDER=google AND GOOGLE_MAPS_API_KEY is set.
    - Address components are mapped onto the Nominatim field names so the
      boundary classifier does not care which provider answered.
    - OVER_QUERY_LIMIT is reported as HTTP 429 so it gets rate-limit backoff.
    """

    name = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: str, timeout: float = 5.0):
        if not api_key:
            raise ValueError("GoogleMapsProvider requires an API key")
        self.api_key = api_key
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, str]:
        params = {
            "latlng": f"{latitude},{longitude}",
            "key": self.api_key,
        }
        try:
            resp = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise GeocodeAttemptError(f"Google Maps request failed: {e}") from e

        if resp.status_code != 200:
            raise GeocodeAttemptError(
                f"Google Maps reverse-geocode failed with status {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data: Dict[str, Any] = resp.json()
        except ValueError as e:
            raise GeocodeAttemptError("Google Maps returned a non-JSON body") from e

        api_status = data.get("status")
        if api_status == "OVER_QUERY_LIMIT":
            raise GeocodeAttemptError("Google Maps quota exceeded", status_code=429)
        results = data.get("results") or []
        if api_status != "OK" or not results:
            raise GeocodeAttemptError(f"Google Maps returned status {api_status}")

        return components_to_address(results[0].get("address_components") or [])


def components_to_address(components: List[Dict[str, Any]]) -> Dict[str, str]:
    address: Dict[str, Optional[str]] = {}
    for component_type, field in _COMPONENT_FIELDS:
        if address.get(field):
            continue
        for c in components:
            if component_type in c.get("types", []):
                address[field] = c.get("long_name")
                break
    return clean_address(address)
