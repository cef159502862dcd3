"""
Domain errors and their HTTP mapping.

Services raise these; the handlers registered in ``eballot.main`` turn them
into JSON bodies that always carry a ``message`` field.
"""
from typing import Any, Dict, List, Optional

from fastapi import status


class EBallotError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Unexpected server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class InvalidInputError(EBallotError):
    """Schema or business-rule validation failure."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None
    ):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, detail: str) -> "InvalidInputError":
        return cls(detail, errors=[{"field": field, "message": detail}])

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class UnauthenticatedError(EBallotError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


class ForbiddenError(EBallotError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotFoundError(EBallotError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ConflictError(EBallotError):
    status_code = status.HTTP_409_CONFLICT
    message = "Conflict"


class AlreadyVotedError(ConflictError):
    message = "You have already voted in this election"


class UnconfiguredError(EBallotError):
    """A required external dependency has no credentials."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Service dependency is not configured"
