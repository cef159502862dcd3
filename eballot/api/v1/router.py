"""
API v1 router configuration.
"""
from fastapi import APIRouter

from eballot.api.v1.endpoints import admin, auth, institutes, users, votes


api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"]
)

api_router.include_router(
    votes.router,
    prefix="/votes",
    tags=["Voting"]
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Administration"]
)

api_router.include_router(
    institutes.router,
    prefix="/institutes",
    tags=["Institutes"]
)

api_router.include_router(
    users.router,
    prefix="/user",
    tags=["Users"]
)
