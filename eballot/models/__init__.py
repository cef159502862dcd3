"""
SQLAlchemy database models.
"""
from eballot.models.election import Election, Position, Candidate, ElectionStatus
from eballot.models.user import User, UserRole, Institute, InstituteType
from eballot.models.vote import Ballot, Vote

__all__ = [
    "Election",
    "Position",
    "Candidate",
    "ElectionStatus",
    "User",
    "UserRole",
    "Institute",
    "InstituteType",
    "Ballot",
    "Vote",
]
