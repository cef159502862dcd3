"""
Institute and user-profile Pydantic schemas.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from eballot.models.user import InstituteType
from eballot.schemas.auth import UserResponse
from eballot.schemas.common import CamelModel


class InstituteResponse(BaseModel):
    code: str
    name: str
    type: InstituteType
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class InstituteListResponse(BaseModel):
    institutes: List[InstituteResponse]


class UpdateInstituteRequest(CamelModel):
    institute_id: str = Field(..., min_length=1, max_length=50, description="Institute code")


class UpdateInstituteResponse(BaseModel):
    message: str
    user: UserResponse
    token: str = Field(..., description="Re-issued bearer token carrying the new institute")
