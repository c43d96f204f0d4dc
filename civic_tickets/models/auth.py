"""
Staff authentication models.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class StaffRole(str, Enum):
    """Fixed set of staff roles. Each role maps to one ticket projection."""
    OFFICER = "OFFICER"
    SUPERVISOR = "SUPERVISOR"


class LoginRequest(BaseModel):
    """
    Request to obtain a staff token. Fields are taken as sent; `role` is
    checked by AuthService so any unusable role ends up as INVALID_ROLE.
    """
    role: Optional[str] = Field(None, description="OFFICER or SUPERVISOR")
    employee_id: Optional[str] = Field(None, alias="employeeId", description="Operator identifier")

    class Config:
        populate_by_name = True

    @classmethod
    def from_body(cls, payload: Any) -> "LoginRequest":
        body = payload if isinstance(payload, dict) else {}
        role = body.get("role")
        employee_id = body.get("employeeId")
        return cls(
            role=role if isinstance(role, str) else None,
            employee_id=str(employee_id) if employee_id not in (None, "") else None,
        )


class LoginResponse(BaseModel):
    token: str
    role: StaffRole


class StaffClaims(BaseModel):
    """Verified token contents."""
    role: StaffRole
    employee_id: str
    subject: str
