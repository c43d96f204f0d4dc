"""
Shared fixtures: in-memory log, temp SQLite store, fake geocoder, and a
TestClient wired to them through dependency overrides.
"""

from typing import Dict, List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from civic_tickets.core.settings import settings
from civic_tickets.dependencies import (
    get_auth_service,
    get_intake_service,
    get_query_service,
    get_ticket_log,
    get_ticket_store,
)
from civic_tickets.main import app
from civic_tickets.models.ticket import Ticket
from civic_tickets.services.auth_service import AuthService
from civic_tickets.services.boundary import BoundaryClassifier, city_aliases
from civic_tickets.services.geocoding import GeocodeResolver, GeocodingProvider, RetryPolicy
from civic_tickets.services.intake_service import IntakeService
from civic_tickets.services.query_service import QueryService
from civic_tickets.services.stream_consumer import TicketStreamConsumer
from civic_tickets.services.ticket_log import InMemoryTicketLog
from civic_tickets.services.ticket_publisher import TicketPublisher
from civic_tickets.services.ticket_store import SqliteTicketStore

# Never start the background consumer from tests
settings.RUN_CONSUMER = False

TEST_SECRET = "test-signing-secret-with-enough-bytes-for-hs256"

BANGALORE_ADDRESS = {
    "suburb": "Sampangi Rama Nagara",
    "city": "Bengaluru",
    "county": "Bangalore North",
    "state_district": "Bangalore Urban",
    "state": "Karnataka",
    "postcode": "560001",
    "country": "India",
}

NEW_YORK_ADDRESS = {
    "road": "Broadway",
    "suburb": "Manhattan",
    "city": "New York",
    "county": "New York County",
    "state": "New York",
    "country": "United States",
}


class FakeGeocoder(GeocodingProvider):
    """Returns (or raises) scripted results in order; the last one repeats."""

    name = "fake"

    def __init__(self, *results: Union[Dict[str, str], Exception]):
        self.results: List[Union[Dict[str, str], Exception]] = list(results)
        self.calls: List[tuple] = []

    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, str]:
        self.calls.append((latitude, longitude))
        index = min(len(self.calls), len(self.results)) - 1
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        return dict(result)


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_ticket(ticket_id: str = "t-1", timestamp: int = 1_700_000_000_000, **overrides) -> Ticket:
    fields = dict(
        id=ticket_id,
        concern="Pothole",
        notes="Deep pothole near the bus stop",
        user_name="Asha",
        contact="asha@example.com",
        lat=12.9716,
        lng=77.5946,
        area="Sampangi Rama Nagara",
        timestamp=timestamp,
    )
    fields.update(overrides)
    return Ticket(**fields)


@pytest.fixture
def ticket_log() -> InMemoryTicketLog:
    return InMemoryTicketLog()


@pytest.fixture
def store(tmp_path) -> SqliteTicketStore:
    s = SqliteTicketStore(str(tmp_path / "tickets.db"))
    yield s
    s.close()


@pytest.fixture
def auth_service() -> AuthService:
    return AuthService(TEST_SECRET)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder(BANGALORE_ADDRESS)


@pytest.fixture
def classifier() -> BoundaryClassifier:
    return BoundaryClassifier("bangalore", city_aliases("bangalore"))


@pytest.fixture
def make_intake(ticket_log, classifier, recording_sleep):
    def _make(provider: GeocodingProvider, log=None) -> IntakeService:
        resolver = GeocodeResolver(provider, RetryPolicy(), timeout=1.0, sleep=recording_sleep)
        return IntakeService(resolver, classifier, TicketPublisher(log if log is not None else ticket_log))

    return _make


@pytest.fixture
def consumer(ticket_log, store, recording_sleep) -> TicketStreamConsumer:
    return TicketStreamConsumer(ticket_log, store, block_ms=10, error_pause=1.0, sleep=recording_sleep)


@pytest.fixture
def api(ticket_log, store, auth_service):
    """
    Returns a factory: api(intake) -> TestClient with the given intake service
    and the shared log/store/auth fixtures wired in.
    """

    def _client(intake: Optional[IntakeService] = None, **kwargs) -> TestClient:
        if intake is not None:
            app.dependency_overrides[get_intake_service] = lambda: intake
        app.dependency_overrides[get_ticket_log] = lambda: ticket_log
        app.dependency_overrides[get_ticket_store] = lambda: store
        app.dependency_overrides[get_query_service] = lambda: QueryService(store)
        app.dependency_overrides[get_auth_service] = lambda: auth_service
        return TestClient(app, **kwargs)

    yield _client
    app.dependency_overrides.clear()
