"""
Error taxonomy for the ticket pipeline.

Every error carries a stable machine-readable `code` and the HTTP status the
API layer renders it with. Routes raise these; `main.py` turns them into
`{"error": ..., "code": ...}` JSON bodies.
"""

from enum import Enum
from typing import Optional


class TicketingError(Exception):
    """Base class for errors surfaced to API clients."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, *, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(TicketingError):
    """Submitted report failed structural/range validation."""

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, field: str, message: str):
        super().__init__("Invalid input", details=f"{field}: {message}")
        self.field = field
        self.reason = message


class GeocodeUnavailable(TicketingError):
    """Reverse geocoding failed on every attempt."""

    code = "GEOCODE_FAILED"
    status_code = 503

    def __init__(self, last_error: Optional[Exception] = None):
        super().__init__("Location validation service temporarily unavailable")
        self.last_error = last_error


class OutsideBoundary(TicketingError):
    code = "OUTSIDE_CITY"
    status_code = 403

    def __init__(self, city_name: str):
        super().__init__(f"Location is outside {city_name.title()} city limits")
        self.city_name = city_name


class PublishFailure(TicketingError):
    """The ticket could not be appended to the durable log."""

    code = "PUBLISH_FAILED"
    status_code = 503

    def __init__(self, ticket_id: str, cause: Optional[Exception] = None):
        super().__init__("Ticket created but delivery failed. Please try again.")
        self.ticket_id = ticket_id
        self.cause = cause


class AuthFailure(str, Enum):
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_OR_EXPIRED = "INVALID_TOKEN"
    INVALID_ROLE = "INVALID_ROLE"


_AUTH_MESSAGES = {
    AuthFailure.MISSING_TOKEN: "Missing authorization token",
    AuthFailure.INVALID_OR_EXPIRED: "Invalid or expired token",
    AuthFailure.INVALID_ROLE: "Invalid role",
}

_AUTH_STATUS = {
    AuthFailure.MISSING_TOKEN: 401,
    AuthFailure.INVALID_OR_EXPIRED: 401,
    AuthFailure.INVALID_ROLE: 403,
}


class AuthError(TicketingError):
    """
    Authentication failure.

    The status defaults by reason (401 for token problems, 403 for a bad role
    claim); login overrides it to 400 for an invalid requested role.
    """

    def __init__(
        self,
        reason: AuthFailure,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
    ):
        super().__init__(message or _AUTH_MESSAGES[reason])
        self.reason = reason
        self.code = reason.value
        self.status_code = status_code or _AUTH_STATUS[reason]


class NotFound(TicketingError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, ticket_id: str):
        super().__init__("Ticket not found")
        self.ticket_id = ticket_id


class Forbidden(TicketingError):
    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)
