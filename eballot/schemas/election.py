"""
Election, Position and Candidate Pydantic schemas.
"""
from typing import Optional, List
from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from eballot.models.election import ElectionStatus
from eballot.schemas.common import CamelModel


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _not_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


def _check_image_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not value.startswith(("http://", "https://", "data:image/")):
        raise ValueError("image_url must be an http(s) URL or an image data URI")
    return value


class ElectionCreate(BaseModel):
    """Schema for creating an election."""

    title: str = Field(..., min_length=1, max_length=200, description="Election title")
    description: Optional[str] = Field(None, description="Election description")
    institute_id: str = Field(..., min_length=1, max_length=50, description="Owning institute code")
    start_date: datetime = Field(..., description="Election start time")
    end_date: datetime = Field(..., description="Election end time")
    status: ElectionStatus = Field(default=ElectionStatus.UPCOMING)

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v):
        return _as_utc(v)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ElectionUpdate(BaseModel):
    """Schema for updating an election; omitted fields are left unchanged."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    institute_id: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[ElectionStatus] = None

    @field_validator("title", "institute_id", "start_date", "end_date", "status")
    @classmethod
    def reject_null(cls, v):
        return _not_null(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v):
        return _as_utc(v)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ElectionResponse(BaseModel):
    """Schema for election response."""

    id: UUID
    title: str
    description: Optional[str]
    institute_id: str
    status: ElectionStatus
    start_date: datetime
    end_date: datetime
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ElectionListResponse(BaseModel):
    elections: List[ElectionResponse]


class ElectionDetailResponse(BaseModel):
    election: ElectionResponse


class ElectionMutationResponse(BaseModel):
    message: str
    election: ElectionResponse


class PositionCreate(BaseModel):
    """Schema for creating a position."""

    election_id: UUID
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0, description="Auto-assigned when omitted")


class PositionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0)

    @field_validator("title", "display_order")
    @classmethod
    def reject_null(cls, v):
        return _not_null(v)


class FindOrCreatePositionRequest(BaseModel):
    election_id: UUID
    title: str = Field(..., min_length=1, max_length=100)


class FindOrCreatePositionResponse(CamelModel):
    position_id: UUID
    created: bool


class PositionResponse(BaseModel):
    id: UUID
    election_id: UUID
    title: str
    description: Optional[str]
    display_order: int
    created_at: datetime

    class Config:
        from_attributes = True


class PositionListResponse(BaseModel):
    positions: List[PositionResponse]


class PositionMutationResponse(BaseModel):
    message: str
    position: PositionResponse


class CandidateCreate(BaseModel):
    """
    Schema for creating a candidate.

    When ``platform`` is omitted it is composed from the description,
    past leadership, grades and qualifications fields.
    """

    name: str = Field(..., min_length=1, max_length=100, description="Candidate name")
    position_id: UUID
    platform: Optional[str] = None
    college: Optional[str] = None
    description: Optional[str] = None
    past_leadership: Optional[str] = None
    grades: Optional[str] = None
    qualifications: Optional[str] = None
    image_url: Optional[str] = Field(None, description="URL or data URI of the candidate photo")

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, v):
        return _check_image_url(v)


class CandidateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    position_id: Optional[UUID] = None
    platform: Optional[str] = None
    college: Optional[str] = None
    description: Optional[str] = None
    past_leadership: Optional[str] = None
    grades: Optional[str] = None
    qualifications: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, v):
        return _check_image_url(v)


class CandidateResponse(BaseModel):
    """Schema for candidate response."""

    id: UUID
    position_id: UUID
    name: str
    platform: Optional[str]
    image_url: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class CandidateElectionSummary(BaseModel):
    id: UUID
    title: str
    institute_id: str

    class Config:
        from_attributes = True


class CandidatePositionSummary(BaseModel):
    id: UUID
    title: str
    election_id: UUID
    election: Optional[CandidateElectionSummary] = None

    class Config:
        from_attributes = True


class CandidateDetailResponse(CandidateResponse):
    """Candidate with its position and election, for admin listings."""

    position: Optional[CandidatePositionSummary] = None


class CandidateListResponse(BaseModel):
    candidates: List[CandidateDetailResponse]


class CandidateGetResponse(BaseModel):
    candidate: CandidateDetailResponse


class CandidateMutationResponse(BaseModel):
    message: str
    candidate: CandidateResponse
