"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from civic_tickets.core.settings import settings
from civic_tickets.dependencies import get_ticket_log, get_ticket_store
from civic_tickets.services.ticket_log import TicketLog
from civic_tickets.services.ticket_store import TicketStore

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/dependencies")
async def dependencies_health(
    log: TicketLog = Depends(get_ticket_log),
    store: TicketStore = Depends(get_ticket_store),
):
    """
    Log and store reachability. 503 if either is down.
    """
    log_ok = await log.ping()
    store_ok = store.ping()
    healthy = log_ok and store_ok
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "degraded",
            "log": {"backend": settings.LOG_BACKEND, "connected": log_ok},
            "store": {"backend": store.backend, "connected": store_ok},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
