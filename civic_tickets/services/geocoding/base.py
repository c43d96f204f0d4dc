from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional
import logging

logger = logging.getLogger(__name__)


class GeocodeAttemptError(Exception):
    """
    A single reverse-geocode attempt failed.

    `status_code` is the upstream HTTP status when there was one
    (429 marks the attempt as rate limited).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GeocodingProvider(ABC):
    """
    Abstract reverse-geocoding provider.

    Contract:
    - Input: latitude, longitude (floats)
    - Output: address mapping keyed by OpenStreetMap locality field names, e.g.
      {
        "suburb": "Shivajinagar",
        "city": "Bengaluru",
        "state_district": "Bangalore Urban",
        "state": "Karnataka",
        "country": "India",
        ...
      }
    - Performs exactly ONE attempt; retries are the caller's job.
    - Raises GeocodeAttemptError on any failure.
    """

    name = "base"

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, str]:
        raise NotImplementedError


def clean_address(address: Mapping[str, Any]) -> Dict[str, str]:
    """Keep only non-empty scalar fields, as strings."""
    cleaned: Dict[str, str] = {}
    for key, value in address.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        text = str(value).strip()
        if text:
            cleaned[key] = text
    return cleaned
