"""
Civic Ticket Pipeline - FastAPI Application Entry Point

Citizens submit location-tagged tickets; tickets inside the configured city
are published to a durable log, persisted by a background consumer, and
served to staff with role-scoped visibility.

DESIGN PRINCIPLES:
- Reject early: validation, geocoding and boundary checks run before publish
- At-least-once hand-off through the log, idempotent persistence
- Stateless bearer tokens, one projection per staff role
"""

import asyncio
import contextlib
import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from civic_tickets.core.errors import TicketingError
from civic_tickets.core.logging_config import configure_logging
from civic_tickets.core.settings import settings
from civic_tickets.dependencies import build_consumer, shutdown_services
from civic_tickets.routes import auth, health, tickets

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Citizen ticket intake with boundary validation and role-scoped staff access",
    debug=settings.DEBUG,
)


@app.exception_handler(TicketingError)
async def ticketing_error_handler(request: Request, exc: TicketingError):
    """Render pipeline/auth errors as {error, code, details?}."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies (bad JSON, wrong shape) get the same first-error format as field validation."""
    errors = exc.errors()
    details = None
    if errors:
        first = errors[0]
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        details = f"{'.'.join(loc) or 'body'}: {first.get('msg', 'Invalid value')}"
    logger.info(f"Request validation failed: path={request.url.path} details={details}")
    content = {"error": "Invalid input", "code": "VALIDATION_ERROR"}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"Unexpected error: {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


# CORS configuration - origins come from settings, never "*"
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Configure logging and start the background stream consumer.
    """
    configure_logging(settings.LOG_LEVEL)
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if not settings.RUN_CONSUMER:
        logger.info("RUN_CONSUMER=false; tickets must be persisted by a separate consumer process")
        return

    consumer = build_consumer()
    app.state.consumer = consumer
    app.state.consumer_task = asyncio.create_task(consumer.run())


@app.on_event("shutdown")
async def shutdown_event():
    """
    Stop the consumer and release the log/store connections.
    """
    consumer = getattr(app.state, "consumer", None)
    task = getattr(app.state, "consumer_task", None)
    if consumer is not None:
        consumer.stop()
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    await shutdown_services()
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(tickets.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "city": settings.CITY_NAME,
    }


def run() -> None:
    """Serve the API with uvicorn (`civic-tickets-api` or `python -m civic_tickets.main`)."""
    uvicorn.run(
        "civic_tickets.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
