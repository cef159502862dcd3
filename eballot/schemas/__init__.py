"""
Pydantic schemas for request/response validation.
"""
from eballot.schemas.auth import (
    OTPRequest,
    OTPRequestResponse,
    OTPVerifyRequest,
    OTPVerifyResponse,
    UserResponse,
)
from eballot.schemas.election import (
    ElectionCreate,
    ElectionUpdate,
    ElectionResponse,
    PositionCreate,
    PositionUpdate,
    PositionResponse,
    CandidateCreate,
    CandidateUpdate,
    CandidateResponse,
)
from eballot.schemas.vote import (
    CastVoteRequest,
    CastVoteResponse,
    VoteStatusResponse,
    BallotResponse,
)
from eballot.schemas.tally import (
    LeaderboardResponse,
    AnalyticsResponse,
)
from eballot.schemas.user import (
    InstituteListResponse,
    UpdateInstituteRequest,
    UpdateInstituteResponse,
)

__all__ = [
    # Auth
    "OTPRequest",
    "OTPRequestResponse",
    "OTPVerifyRequest",
    "OTPVerifyResponse",
    "UserResponse",
    # Election
    "ElectionCreate",
    "ElectionUpdate",
    "ElectionResponse",
    "PositionCreate",
    "PositionUpdate",
    "PositionResponse",
    "CandidateCreate",
    "CandidateUpdate",
    "CandidateResponse",
    # Vote
    "CastVoteRequest",
    "CastVoteResponse",
    "VoteStatusResponse",
    "BallotResponse",
    # Tally
    "LeaderboardResponse",
    "AnalyticsResponse",
    # User
    "InstituteListResponse",
    "UpdateInstituteRequest",
    "UpdateInstituteResponse",
]
