"""
Administration endpoints: the election registry and analytics.
All routes require an admin bearer token.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from redis import asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.database import get_db
from eballot.services.election_service import ElectionService
from eballot.services.tally_service import TallyService
from eballot.schemas.common import MessageResponse
from eballot.schemas.election import (
    ElectionCreate,
    ElectionUpdate,
    ElectionListResponse,
    ElectionDetailResponse,
    ElectionMutationResponse,
    PositionCreate,
    PositionUpdate,
    PositionListResponse,
    PositionMutationResponse,
    FindOrCreatePositionRequest,
    FindOrCreatePositionResponse,
    CandidateCreate,
    CandidateUpdate,
    CandidateListResponse,
    CandidateGetResponse,
    CandidateMutationResponse,
)
from eballot.schemas.tally import AnalyticsResponse
from eballot.api.v1.deps import get_redis, require_admin


router = APIRouter(dependencies=[Depends(require_admin)])


# Elections

@router.get("/elections", response_model=ElectionListResponse)
async def list_elections(
    db: AsyncSession = Depends(get_db)
) -> ElectionListResponse:
    """Get all elections, newest first."""
    election_service = ElectionService(db)
    elections = await election_service.get_elections()

    return ElectionListResponse(elections=elections)


@router.post("/elections", response_model=ElectionMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_election(
    request: ElectionCreate,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> ElectionMutationResponse:
    election_service = ElectionService(db, redis)
    election = await election_service.create_election(request)

    return ElectionMutationResponse(message="Election created successfully", election=election)


@router.get("/elections/{election_id}", response_model=ElectionDetailResponse)
async def get_election(
    election_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> ElectionDetailResponse:
    election_service = ElectionService(db)
    election = await election_service.get_election(election_id)

    return ElectionDetailResponse(election=election)


@router.put("/elections/{election_id}", response_model=ElectionMutationResponse)
async def update_election(
    election_id: UUID,
    request: ElectionUpdate,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> ElectionMutationResponse:
    election_service = ElectionService(db, redis)
    election = await election_service.update_election(election_id, request)

    return ElectionMutationResponse(message="Election updated successfully", election=election)


@router.delete("/elections/{election_id}", response_model=MessageResponse)
async def delete_election(
    election_id: UUID,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> MessageResponse:
    """Delete an election together with its positions, candidates and votes."""
    election_service = ElectionService(db, redis)
    await election_service.delete_election(election_id)

    return MessageResponse(message="Election deleted successfully")


@router.get("/elections/{election_id}/positions", response_model=PositionListResponse)
async def list_positions(
    election_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> PositionListResponse:
    election_service = ElectionService(db)
    positions = await election_service.get_positions(election_id)

    return PositionListResponse(positions=positions)


# Positions

@router.post("/positions", response_model=PositionMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_position(
    request: PositionCreate,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> PositionMutationResponse:
    """
    Add a position to an election.
    Without display_order the position goes after the current last one.
    """
    election_service = ElectionService(db, redis)
    position = await election_service.create_position(request)

    return PositionMutationResponse(message="Position created successfully", position=position)


@router.post("/positions/find-or-create", response_model=FindOrCreatePositionResponse)
async def find_or_create_position(
    request: FindOrCreatePositionRequest,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> FindOrCreatePositionResponse:
    election_service = ElectionService(db, redis)
    position, created = await election_service.find_or_create_position(
        request.election_id,
        request.title
    )

    return FindOrCreatePositionResponse(position_id=position.id, created=created)


@router.put("/positions/{position_id}", response_model=PositionMutationResponse)
async def update_position(
    position_id: UUID,
    request: PositionUpdate,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> PositionMutationResponse:
    election_service = ElectionService(db, redis)
    position = await election_service.update_position(position_id, request)

    return PositionMutationResponse(message="Position updated successfully", position=position)


@router.delete("/positions/{position_id}", response_model=MessageResponse)
async def delete_position(
    position_id: UUID,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> MessageResponse:
    election_service = ElectionService(db, redis)
    await election_service.delete_position(position_id)

    return MessageResponse(message="Position deleted successfully")


# Candidates

@router.get("/candidates", response_model=CandidateListResponse)
async def list_candidates(
    db: AsyncSession = Depends(get_db)
) -> CandidateListResponse:
    election_service = ElectionService(db)
    candidates = await election_service.get_candidates()

    return CandidateListResponse(candidates=candidates)


@router.post("/candidates", response_model=CandidateMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_candidate(
    request: CandidateCreate,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> CandidateMutationResponse:
    election_service = ElectionService(db, redis)
    candidate = await election_service.create_candidate(request)

    return CandidateMutationResponse(message="Candidate created successfully", candidate=candidate)


@router.get("/candidates/{candidate_id}", response_model=CandidateGetResponse)
async def get_candidate(
    candidate_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> CandidateGetResponse:
    election_service = ElectionService(db)
    candidate = await election_service.get_candidate(candidate_id)

    return CandidateGetResponse(candidate=candidate)


@router.put("/candidates/{candidate_id}", response_model=CandidateMutationResponse)
async def update_candidate(
    candidate_id: UUID,
    request: CandidateUpdate,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> CandidateMutationResponse:
    election_service = ElectionService(db, redis)
    candidate = await election_service.update_candidate(candidate_id, request)

    return CandidateMutationResponse(message="Candidate updated successfully", candidate=candidate)


@router.delete("/candidates/{candidate_id}", response_model=MessageResponse)
async def delete_candidate(
    candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis)
) -> MessageResponse:
    election_service = ElectionService(db, redis)
    await election_service.delete_candidate(candidate_id)

    return MessageResponse(message="Candidate deleted successfully")


# Analytics

@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    db: AsyncSession = Depends(get_db)
) -> AnalyticsResponse:
    """Turnout, per-institute vote counts and votes per hour over the last day."""
    tally_service = TallyService(db)
    analytics = await tally_service.get_analytics()

    return AnalyticsResponse.model_validate(analytics)
