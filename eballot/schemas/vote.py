"""
Vote-related Pydantic schemas.
"""
from typing import List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from eballot.schemas.common import CamelModel
from eballot.schemas.election import ElectionResponse


ABSTAIN = "abstain"


class VoteSelection(CamelModel):
    """One position on the ballot and the voter's choice for it."""

    position_id: UUID = Field(..., description="Position being voted on")
    candidate_id: Union[UUID, Literal["abstain"]] = Field(
        ...,
        description='Chosen candidate, or "abstain"'
    )

    @property
    def chosen_candidate_id(self) -> Optional[UUID]:
        """The candidate reference to store; None records an abstention."""
        return None if self.candidate_id == ABSTAIN else self.candidate_id


class CastVoteRequest(CamelModel):
    """Request to cast a full ballot for one election."""

    election_id: UUID = Field(..., description="ID of the election")
    votes: List[VoteSelection] = Field(..., min_length=1, description="One selection per position")


class CastVoteResponse(CamelModel):
    success: bool = Field(..., description="Whether the ballot was recorded")
    votes_count: int = Field(..., description="Number of position selections stored")


class VoteStatusResponse(CamelModel):
    has_voted: bool = Field(..., description="Whether the caller has voted in the election")


class ActiveElectionsResponse(BaseModel):
    elections: List[ElectionResponse]


class BallotCandidate(BaseModel):
    id: UUID
    name: str
    platform: Optional[str] = None
    image_url: Optional[str] = None


class BallotPosition(BaseModel):
    """A position with the candidates running for it."""

    id: UUID
    title: str
    description: Optional[str] = None
    display_order: int
    candidates: List[BallotCandidate]


class BallotResponse(BaseModel):
    candidates: List[BallotPosition]
