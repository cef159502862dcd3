"""
Shared schema bases.
"""
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema whose JSON keys are camelCase (``votesCount``, ``hasVoted``)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class FieldError(BaseModel):
    field: str
    message: str


class MessageResponse(BaseModel):
    """Generic acknowledgement and error body."""

    message: str = Field(..., description="Human readable outcome")
    errors: Optional[List[FieldError]] = None
