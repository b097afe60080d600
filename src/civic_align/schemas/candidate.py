# src/civic_align/schemas/candidate.py
"""Candidate, alignment and leaderboard Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class AlignmentResponse(BaseModel):
    """Alignment of one candidate for one voter."""

    candidate_id: str
    voter_id: str
    score: int
    matched_issues: list[str]
    has_dealbreaker: bool


class LeaderboardEntryOut(BaseModel):
    """Leaderboard row for an approved candidate."""

    rank: int
    candidate_id: str
    display_name: str
    endorsement_count: int
    profile_views: int
    trending_score: int | None
    trending_rank: int | None
    endorsement_rank: int | None
    average_spectrum: float
    alignment_score: int | None = None

    model_config = ConfigDict(from_attributes=True)


class CandidateResponse(BaseModel):
    """Schema for candidate information returned by the API."""

    id: str
    display_name: str
    status: str
    endorsement_count: int
    trending_score: int | None
    trending_rank: int | None
    endorsement_rank: int | None
    elimination_reason: str | None = None

    model_config = ConfigDict(from_attributes=True)
