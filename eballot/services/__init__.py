"""
Business logic services.
"""
from eballot.services.auth_service import AuthService
from eballot.services.election_service import ElectionService
from eballot.services.vote_service import VoteService
from eballot.services.tally_service import TallyService
from eballot.services.user_service import UserService

__all__ = [
    "AuthService",
    "ElectionService",
    "VoteService",
    "TallyService",
    "UserService",
]
