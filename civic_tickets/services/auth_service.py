"""
Auth Service - issue and verify staff bearer tokens.

Tokens are stateless HS256 JWTs:
- role: OFFICER | SUPERVISOR
- employeeId: operator identifier ("demo" when not given)
- sub: "employee"
- iat / exp: expiry TOKEN_TTL_HOURS (24h) after issuance

Nothing is stored server-side; every request is verified by signature + expiry.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from civic_tickets.core.errors import AuthError, AuthFailure
from civic_tickets.models.auth import StaffClaims, StaffRole

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SUBJECT = "employee"
DEFAULT_EMPLOYEE_ID = "demo"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    role: StaffRole
    expires_at: datetime


def parse_role(value: Optional[str]) -> Optional[StaffRole]:
    try:
        return StaffRole(value)
    except ValueError:
        return None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    value = re.sub(r"^\s*bearer(\s+|$)", "", authorization, flags=re.IGNORECASE)
    return value.strip() or None


class AuthService:
    def __init__(self, secret: str, ttl_hours: int = 24):
        if not secret:
            raise ValueError("AuthService requires a signing secret")
        self._secret = secret
        self.ttl = timedelta(hours=ttl_hours)

    def issue(
        self,
        role: Optional[str],
        operator_id: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        """
        Raises:
            AuthError(INVALID_ROLE): role is not OFFICER or SUPERVISOR (HTTP 400)
        """
        staff_role = parse_role(role)
        if staff_role is None:
            raise AuthError(
                AuthFailure.INVALID_ROLE,
                "Valid role (OFFICER or SUPERVISOR) required",
                status_code=400,
            )

        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self.ttl
        claims = {
            "role": staff_role.value,
            "employeeId": operator_id or DEFAULT_EMPLOYEE_ID,
            "sub": SUBJECT,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(claims, self._secret, algorithm=ALGORITHM)
        logger.info(f"Issued {staff_role.value} token for employee {claims['employeeId']}")
        return IssuedToken(token=token, role=staff_role, expires_at=expires_at)

    def verify(self, token: Optional[str]) -> StaffClaims:
        """
        Raises:
            AuthError(MISSING_TOKEN): no token
            AuthError(INVALID_OR_EXPIRED): bad signature, malformed, or expired
            AuthError(INVALID_ROLE): token is valid but carries an unknown role
        """
        if not token:
            raise AuthError(AuthFailure.MISSING_TOKEN)

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.PyJWTError as e:
            logger.info(f"Token rejected: {e}")
            raise AuthError(AuthFailure.INVALID_OR_EXPIRED) from e

        staff_role = parse_role(payload.get("role"))
        if staff_role is None:
            raise AuthError(AuthFailure.INVALID_ROLE)

        return StaffClaims(
            role=staff_role,
            employee_id=str(payload.get("employeeId") or DEFAULT_EMPLOYEE_ID),
            subject=str(payload.get("sub") or SUBJECT),
        )
