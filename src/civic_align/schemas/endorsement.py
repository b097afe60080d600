# src/civic_align/schemas/endorsement.py
"""Endorsement-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EndorsementCreate(BaseModel):
    """Schema for endorsing a candidate."""

    voter_id: str = Field(..., min_length=1)
    candidate_id: str = Field(..., min_length=1)


class EndorsementResponse(BaseModel):
    """Schema for an endorsement returned by the API."""

    id: int
    voter_id: str
    candidate_id: str
    is_active: bool
    created_at: datetime
    revoked_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class EndorsementStatus(BaseModel):
    active: bool


class RevokeResponse(BaseModel):
    revoked: bool
