"""
Authentication-related Pydantic schemas.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from eballot.schemas.common import CamelModel


class OTPRequest(BaseModel):
    """Request a one-time passcode for an institutional email."""

    email: EmailStr = Field(..., description="Institutional email address")


class OTPRequestMeta(CamelModel):
    success: bool
    message: str
    email: str
    expires_in: int = Field(..., description="Seconds until the passcode expires")


class OTPRequestResponse(BaseModel):
    message: str
    meta: OTPRequestMeta


class OTPVerifyRequest(BaseModel):
    """Exchange a passcode for a bearer token."""

    email: EmailStr = Field(..., description="Email the passcode was sent to")
    otp: str = Field(..., pattern=r"^\d{6}$", description="Six digit passcode")


class UserResponse(CamelModel):
    """Public view of a user account."""

    id: str
    name: str
    email: str
    institute_id: Optional[str] = None
    role: str


class OTPVerifyResponse(BaseModel):
    message: str
    token: str = Field(..., description="Signed bearer token, valid for 12 hours")
    user: UserResponse
