"""
Pydantic models for citizen tickets.

- TicketSubmission: what citizens POST (validated, not yet geocoded)
- Ticket: the canonical record published to the log and persisted
- OfficerTicketView / SupervisorTicketView: role-scoped read projections
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class TicketSubmission(BaseModel):
    """
    Incoming report. Field order matters: validation errors are reported
    for the first failing field in declaration order.
    """
    concern: str = Field(..., min_length=1, max_length=100, description="Short issue category")
    notes: Optional[str] = Field(None, max_length=2000, description="Optional free-text details")
    user_name: str = Field(..., alias="userName", min_length=1, max_length=200, description="Submitter name")
    contact: Optional[str] = Field(None, max_length=100, description="Optional phone/email")
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        # JSON numbers only; no "12.9" strings or booleans
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("Expected number")
        return value

    class Config:
        populate_by_name = True
        frozen = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "concern": "Pothole",
                "notes": "Deep pothole near the bus stop",
                "userName": "Asha",
                "contact": "+91 98450 00000",
                "lat": 12.9716,
                "lng": 77.5946,
            }
        }


class Ticket(BaseModel):
    """
    Canonical ticket record. Only built after boundary classification passed,
    so `area` is always present.
    """
    id: str
    concern: str
    notes: Optional[str] = None
    user_name: str = Field(..., alias="userName")
    contact: Optional[str] = None
    lat: float
    lng: float
    area: str = Field(..., min_length=1)
    timestamp: int = Field(..., description="Creation time, epoch milliseconds")

    class Config:
        populate_by_name = True
        frozen = True

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, payload: str) -> "Ticket":
        return cls.model_validate_json(payload)


class OfficerTicketView(BaseModel):
    """What an OFFICER may see: no submitter details or coordinates."""
    id: str
    concern: str
    area: str
    timestamp: int

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "OfficerTicketView":
        return cls(id=ticket.id, concern=ticket.concern, area=ticket.area, timestamp=ticket.timestamp)


class SupervisorTicketView(BaseModel):
    """Full record, as seen by a SUPERVISOR."""
    id: str
    concern: str
    notes: Optional[str] = None
    user_name: str = Field(..., alias="userName")
    contact: Optional[str] = None
    lat: float
    lng: float
    area: str
    timestamp: int

    class Config:
        populate_by_name = True

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "SupervisorTicketView":
        return cls(**ticket.model_dump())


class TicketCreatedResponse(BaseModel):
    ticket_id: str = Field(..., alias="ticketId")

    class Config:
        populate_by_name = True
