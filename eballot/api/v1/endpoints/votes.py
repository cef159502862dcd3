"""
Vote submission and voter-facing read endpoints.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from redis import asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.database import get_db
from eballot.core.security import AuthContext
from eballot.services.tally_service import TallyService
from eballot.services.vote_service import VoteService
from eballot.schemas.tally import LeaderboardResponse
from eballot.schemas.vote import (
    ActiveElectionsResponse,
    BallotResponse,
    CastVoteRequest,
    CastVoteResponse,
    VoteStatusResponse,
)
from eballot.api.v1.deps import get_current_user, get_redis, subject_uuid


router = APIRouter()


@router.get("/leaderboard/{institute_id}", response_model=LeaderboardResponse)
async def get_leaderboard(
    institute_id: str,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> LeaderboardResponse:
    """Live vote counts for every candidate in the institute's elections."""
    tally_service = TallyService(db, redis)
    leaderboard = await tally_service.get_leaderboard(institute_id)

    return LeaderboardResponse(institute_id=institute_id, leaderboard=leaderboard)


@router.get("/elections/active", response_model=ActiveElectionsResponse)
async def list_active_elections(
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis),
    current_user: AuthContext = Depends(get_current_user)
) -> ActiveElectionsResponse:
    """Active elections for the caller's institute."""
    vote_service = VoteService(db, redis)
    elections = await vote_service.get_active_elections(current_user.institute_id)

    return ActiveElectionsResponse(elections=elections)


@router.get("/elections/{election_id}/candidates", response_model=BallotResponse)
async def get_ballot(
    election_id: UUID,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> BallotResponse:
    """Positions in ballot order, each with the candidates running for it."""
    vote_service = VoteService(db, redis)
    ballot = await vote_service.get_election_candidates(election_id)

    return BallotResponse(candidates=ballot)


@router.post("/cast", response_model=CastVoteResponse, status_code=status.HTTP_201_CREATED)
async def cast_vote(
    request: CastVoteRequest,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis),
    current_user: AuthContext = Depends(get_current_user)
) -> CastVoteResponse:
    """
    Cast a full ballot.

    Each voter gets one ballot per election. A second ballot, including one
    racing the first, is rejected with 409 and nothing from it is stored.
    """
    vote_service = VoteService(db, redis)
    votes_count = await vote_service.cast_vote(
        user_id=subject_uuid(current_user),
        election_id=request.election_id,
        selections=request.votes
    )

    return CastVoteResponse(success=True, votes_count=votes_count)


@router.get("/check/{election_id}", response_model=VoteStatusResponse)
async def check_vote_status(
    election_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
) -> VoteStatusResponse:
    vote_service = VoteService(db)
    has_voted = await vote_service.has_voted(subject_uuid(current_user), election_id)

    return VoteStatusResponse(has_voted=has_voted)
