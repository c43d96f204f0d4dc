"""
Ticket endpoints - citizen submission and staff reads.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Header

from civic_tickets.dependencies import get_auth_service, get_intake_service, get_query_service
from civic_tickets.models.auth import StaffClaims
from civic_tickets.services.auth_service import AuthService, bearer_token
from civic_tickets.services.intake_service import IntakeService
from civic_tickets.services.query_service import QueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["Tickets"])


def require_staff(
    authorization: Optional[str] = Header(None),
    auth: AuthService = Depends(get_auth_service),
) -> StaffClaims:
    """Verify the bearer token; AuthError is rendered by the app's handler."""
    return auth.verify(bearer_token(authorization))


@router.post("")
async def submit_ticket(
    payload: Any = Body(...),
    intake: IntakeService = Depends(get_intake_service),
) -> Dict[str, str]:
    """
    Submit a citizen report.

    This endpoint:
    1. Validates the report fields
    2. Reverse geocodes the coordinates and checks the city boundary
    3. Publishes the ticket to the durable log

    Returns the generated ticket id. The ticket shows up in staff reads once
    the consumer has persisted it.
    """
    ticket = await intake.submit(payload)
    return {"ticketId": ticket.id}


@router.get("")
async def list_tickets(
    claims: StaffClaims = Depends(require_staff),
    queries: QueryService = Depends(get_query_service),
) -> List[Dict[str, Any]]:
    return [view.model_dump(by_alias=True) for view in queries.list_tickets(claims.role)]


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    claims: StaffClaims = Depends(require_staff),
    queries: QueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    return queries.get_ticket(claims.role, ticket_id).model_dump(by_alias=True)
