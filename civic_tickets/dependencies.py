"""
Service wiring.

Each getter builds its service once from settings and caches it. Routes use
these through FastAPI's Depends, so tests swap them with
`app.dependency_overrides`.
"""

import logging
from typing import Optional

from civic_tickets.core.settings import settings
from civic_tickets.services.auth_service import AuthService
from civic_tickets.services.boundary import BoundaryClassifier, city_aliases
from civic_tickets.services.geocoding import GeocodeResolver, RetryPolicy, get_geocoding_provider
from civic_tickets.services.intake_service import IntakeService
from civic_tickets.services.query_service import QueryService
from civic_tickets.services.stream_consumer import TicketStreamConsumer
from civic_tickets.services.ticket_log import InMemoryTicketLog, RedisStreamTicketLog, TicketLog
from civic_tickets.services.ticket_publisher import TicketPublisher
from civic_tickets.services.ticket_store import SqliteTicketStore, TicketStore

logger = logging.getLogger(__name__)

_ticket_log: Optional[TicketLog] = None
_ticket_store: Optional[TicketStore] = None
_auth_service: Optional[AuthService] = None
_intake_service: Optional[IntakeService] = None


def get_ticket_log() -> TicketLog:
    global _ticket_log
    if _ticket_log is None:
        backend = settings.LOG_BACKEND.lower()
        if backend == "memory":
            logger.warning("Using in-memory ticket log: tickets are lost on restart")
            _ticket_log = InMemoryTicketLog()
        elif backend == "redis":
            _ticket_log = RedisStreamTicketLog.from_url(settings.REDIS_URL, settings.TICKET_STREAM)
        else:
            raise RuntimeError(f"Unknown LOG_BACKEND '{settings.LOG_BACKEND}' (expected 'redis' or 'memory')")
    return _ticket_log


def get_ticket_store() -> TicketStore:
    global _ticket_store
    if _ticket_store is None:
        backend = settings.STORE_BACKEND.lower()
        if backend == "sqlite":
            _ticket_store = SqliteTicketStore(settings.DB_PATH)
        elif backend == "firestore":
            from civic_tickets.config.firebase import get_db
            from civic_tickets.services.ticket_store.firestore_store import FirestoreTicketStore

            _ticket_store = FirestoreTicketStore(get_db())
        else:
            raise RuntimeError(f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}' (expected 'sqlite' or 'firestore')")
    return _ticket_store


def get_auth_service() -> AuthService:
    global _auth_service
    if _auth_service is None:
        if settings.JWT_SECRET == "change-me":
            logger.warning("JWT_SECRET is the built-in default; set it in .env before deploying")
        _auth_service = AuthService(settings.JWT_SECRET, ttl_hours=settings.TOKEN_TTL_HOURS)
    return _auth_service


def get_boundary_classifier() -> BoundaryClassifier:
    return BoundaryClassifier(settings.CITY_NAME, city_aliases(settings.CITY_NAME, settings.CITY_ALIASES))


def get_intake_service() -> IntakeService:
    global _intake_service
    if _intake_service is None:
        resolver = GeocodeResolver(
            get_geocoding_provider(),
            RetryPolicy(max_attempts=settings.GEOCODING_MAX_ATTEMPTS),
            timeout=settings.GEOCODING_TIMEOUT_SECONDS,
        )
        _intake_service = IntakeService(resolver, get_boundary_classifier(), TicketPublisher(get_ticket_log()))
    return _intake_service


def get_query_service() -> QueryService:
    return QueryService(get_ticket_store())


def build_consumer(log: Optional[TicketLog] = None, store: Optional[TicketStore] = None) -> TicketStreamConsumer:
    return TicketStreamConsumer(
        log or get_ticket_log(),
        store or get_ticket_store(),
        stream_name=settings.TICKET_STREAM,
        block_ms=settings.CONSUMER_BLOCK_MS,
        batch_size=settings.CONSUMER_BATCH_SIZE,
        error_pause=settings.CONSUMER_ERROR_PAUSE_SECONDS,
        start_position=settings.CONSUMER_START_POSITION,
    )


async def shutdown_services() -> None:
    global _ticket_log, _ticket_store, _intake_service
    if _ticket_log is not None:
        await _ticket_log.close()
        _ticket_log = None
    if _ticket_store is not None:
        _ticket_store.close()
        _ticket_store = None
    _intake_service = None
