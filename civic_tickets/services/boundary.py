"""
Boundary classification.

Two pure functions over a resolved address mapping:
- resolve_area: a human-readable area name for the ticket
- is_within_city: whether the address lies inside the configured city

CRITICAL: both are deterministic - same address always produces the same
answer. No network, no state.
"""

import logging
from typing import Iterable, List, Mapping, Optional

from civic_tickets.core.errors import OutsideBoundary

logger = logging.getLogger(__name__)

UNKNOWN_AREA = "Unknown"

# Most specific first
AREA_FIELDS = ("suburb", "neighbourhood", "locality", "village", "city_district", "county", "road")

# Administrative fields searched for the city name
CITY_FIELDS = ("city", "town", "village", "state_district", "county", "state")

# Renamed cities whose old and new names both show up in geocoder output
KNOWN_ALIASES = {
    "bangalore": ["bengaluru"],
    "bengaluru": ["bangalore"],
    "bombay": ["mumbai"],
    "mumbai": ["bombay"],
    "madras": ["chennai"],
    "chennai": ["madras"],
    "calcutta": ["kolkata"],
    "kolkata": ["calcutta"],
    "gurgaon": ["gurugram"],
    "gurugram": ["gurgaon"],
    "mysore": ["mysuru"],
    "mysuru": ["mysore"],
}


def city_aliases(city_name: str, extra: Optional[str] = None) -> List[str]:
    """
    Build the lowercase alias list for the configured city.

    Args:
        city_name: configured city (always an alias)
        extra: optional comma-separated additional aliases

    Returns:
        De-duplicated aliases, configured name first
    """
    base = city_name.strip().lower()
    aliases = [base] if base else []
    aliases.extend(KNOWN_ALIASES.get(base, []))
    if extra:
        aliases.extend(part.strip().lower() for part in extra.split(","))
    seen = set()
    result = []
    for alias in aliases:
        if alias and alias not in seen:
            seen.add(alias)
            result.append(alias)
    return result


def resolve_area(address: Mapping[str, str]) -> str:
    """Return the first non-blank locality field, or "Unknown"."""
    for field in AREA_FIELDS:
        value = address.get(field)
        if value and str(value).strip():
            return str(value).strip()
    return UNKNOWN_AREA


def is_within_city(address: Mapping[str, str], aliases: Iterable[str]) -> bool:
    searchable = " ".join(
        str(address[field]) for field in CITY_FIELDS if address.get(field)
    ).lower()
    return any(alias.lower() in searchable for alias in aliases if alias)


class BoundaryClassifier:
    """Boundary check plus area resolution for one configured city."""

    def __init__(self, city_name: str, aliases: Optional[Iterable[str]] = None):
        self.city_name = city_name
        self.aliases = list(aliases) if aliases is not None else city_aliases(city_name)
        if not self.aliases:
            raise ValueError("BoundaryClassifier needs at least one city alias")

    def contains(self, address: Mapping[str, str]) -> bool:
        return is_within_city(address, self.aliases)

    def classify(self, address: Mapping[str, str]) -> str:
        """
        Returns:
            The resolved area name

        Raises:
            OutsideBoundary: the address is not inside the configured city
        """
        if not self.contains(address):
            raise OutsideBoundary(self.city_name)
        return resolve_area(address)
