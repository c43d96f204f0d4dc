import pytest

from civic_tickets.core.errors import OutsideBoundary
from civic_tickets.services.boundary import (
    UNKNOWN_AREA,
    BoundaryClassifier,
    city_aliases,
    is_within_city,
    resolve_area,
)
from tests.conftest import BANGALORE_ADDRESS, NEW_YORK_ADDRESS

ALIASES = ["bangalore", "bengaluru"]


class TestCityAliases:
    def test_bangalore_includes_bengaluru(self):
        assert city_aliases("Bangalore") == ["bangalore", "bengaluru"]

    def test_extra_aliases_are_appended_once(self):
        assert city_aliases("pune", "Poona, pune ,") == ["pune", "poona"]

    def test_unknown_city_is_its_own_alias(self):
        assert city_aliases("  Nashik ") == ["nashik"]


class TestResolveArea:
    @pytest.mark.parametrize(
        "address, expected",
        [
            (BANGALORE_ADDRESS, "Sampangi Rama Nagara"),
            ({"neighbourhood": "Indiranagar", "road": "100 Feet Road"}, "Indiranagar"),
            ({"locality": "Koramangala", "village": "Ejipura"}, "Koramangala"),
            ({"village": "Hoskote", "county": "Bangalore Rural"}, "Hoskote"),
            ({"city_district": "East Zone", "road": "MG Road"}, "East Zone"),
            ({"county": "Bangalore North", "road": "MG Road"}, "Bangalore North"),
            ({"road": "MG Road", "city": "Bengaluru"}, "MG Road"),
        ],
    )
    def test_first_field_in_priority_order(self, address, expected):
        assert resolve_area(address) == expected

    def test_blank_values_are_skipped(self):
        assert resolve_area({"suburb": "  ", "neighbourhood": "", "road": "Church Street"}) == "Church Street"

    @pytest.mark.parametrize("address", [{}, {"city": "Bengaluru", "state": "Karnataka"}, {"suburb": ""}])
    def test_falls_back_to_unknown(self, address):
        assert resolve_area(address) == UNKNOWN_AREA

    def test_is_deterministic(self):
        assert resolve_area(dict(BANGALORE_ADDRESS)) == resolve_area(dict(BANGALORE_ADDRESS))


class TestIsWithinCity:
    def test_alias_in_city_field(self):
        assert is_within_city(BANGALORE_ADDRESS, ALIASES) is True

    def test_outside_city(self):
        assert is_within_city(NEW_YORK_ADDRESS, ALIASES) is False

    @pytest.mark.parametrize("field", ["city", "town", "village", "state_district", "county", "state"])
    def test_each_administrative_field_is_searched(self, field):
        assert is_within_city({field: "Greater BENGALURU Area"}, ALIASES) is True

    def test_locality_fields_are_not_searched(self):
        assert is_within_city({"suburb": "Bangalore Cantonment", "city": "Chennai"}, ALIASES) is False

    def test_aliases_match_case_insensitively(self):
        assert is_within_city({"city": "bengaluru"}, ["Bengaluru"]) is True

    def test_empty_address_is_outside(self):
        assert is_within_city({}, ALIASES) is False


class TestBoundaryClassifier:
    def test_classify_returns_area_inside_city(self):
        assert BoundaryClassifier("bangalore").classify(BANGALORE_ADDRESS) == "Sampangi Rama Nagara"

    def test_classify_raises_outside_city(self):
        with pytest.raises(OutsideBoundary) as exc_info:
            BoundaryClassifier("bangalore").classify(NEW_YORK_ADDRESS)
        assert exc_info.value.code == "OUTSIDE_CITY"
        assert exc_info.value.status_code == 403
        assert "Bangalore" in exc_info.value.message

    def test_requires_an_alias(self):
        with pytest.raises(ValueError):
            BoundaryClassifier("", [])
