"""
Authentication endpoint - staff login by role.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from civic_tickets.dependencies import get_auth_service
from civic_tickets.models.auth import LoginRequest, LoginResponse
from civic_tickets.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(payload: Any = Body(None), auth: AuthService = Depends(get_auth_service)):
    """
    Issue a 24h bearer token for OFFICER or SUPERVISOR.

    Any other body (missing, not an object, no valid role) is rejected with
    400 INVALID_ROLE.
    """
    request = LoginRequest.from_body(payload)
    issued = auth.issue(request.role, request.employee_id)
    return LoginResponse(token=issued.token, role=issued.role)
