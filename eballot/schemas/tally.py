"""
Leaderboard and analytics Pydantic schemas.
"""
from typing import Dict, List, Optional

from pydantic import Field

from eballot.schemas.common import CamelModel


class LeaderboardEntry(CamelModel):
    """Vote count for one candidate, or for the abstain bucket."""

    candidate_id: str = Field(..., description='Candidate ID or "abstain"')
    name: str
    image_url: Optional[str] = None
    votes: int = Field(..., ge=0)


class LeaderboardResponse(CamelModel):
    institute_id: str
    leaderboard: List[LeaderboardEntry]


class AnalyticsStats(CamelModel):
    total_voters: int = Field(..., description="Registered students")
    votes_cast: int = Field(..., description="Stored vote rows")
    turnout_rate: float = Field(..., description="votes_cast / total_voters * 100, 0 without voters")
    active_elections: int
    completed_elections: int


class AnalyticsResponse(CamelModel):
    stats: AnalyticsStats
    institute_breakdown: Dict[str, int] = Field(
        ...,
        description="Vote rows per institute of the owning election"
    )
    hourly_votes: Dict[str, int] = Field(
        ...,
        description='Vote rows over the last 24 hours keyed by local hour ("14:00")'
    )
