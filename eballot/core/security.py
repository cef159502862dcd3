"""
Security utilities for authentication and authorization.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from eballot.core.config import settings
from eballot.core.exceptions import UnauthenticatedError


ADMIN_ROLE = "admin"
STUDENT_ROLE = "student"


@dataclass(frozen=True)
class AuthContext:
    """Caller identity extracted from a verified bearer token."""

    subject_id: str
    email: str
    role: str
    institute_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed JWT access token."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(hours=settings.JWT_EXPIRE_HOURS)

    to_encode.update({
        "exp": expire,
        "iat": now,
        "iss": settings.JWT_ISSUER,
    })

    return jwt.encode(
        to_encode,
        settings.APP_JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT token; None when signature or expiry fail."""
    try:
        return jwt.decode(
            token,
            settings.APP_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
    except JWTError:
        return None


def verify_token(token: str) -> AuthContext:
    """
    Verify a bearer token and return the caller's identity.

    Signature and expiry failures share one message so callers cannot tell
    which check rejected the token.
    """
    payload = decode_token(token)
    if payload is None:
        raise UnauthenticatedError("Invalid or expired token")

    subject_id = str(payload.get("sub") or payload.get("id") or "")
    email = str(payload.get("email") or "")
    if not subject_id or not email:
        raise UnauthenticatedError("Invalid authorization token")

    return AuthContext(
        subject_id=subject_id,
        email=email,
        role=payload.get("role") or STUDENT_ROLE,
        institute_id=payload.get("instituteId"),
    )


def generate_otp() -> str:
    """Generate a six digit one-time passcode."""
    return str(100000 + secrets.randbelow(900000))


def otp_matches(expected: str, supplied: str) -> bool:
    return secrets.compare_digest(expected.encode(), supplied.encode())
