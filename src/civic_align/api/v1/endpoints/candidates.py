# src/civic_align/api/v1/endpoints/candidates.py
"""Candidate detail, alignment and leaderboard endpoints."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from civic_align.core.settings import settings
from civic_align.db.session import get_db
from civic_align.models import Candidate, VoterPreferences
from civic_align.repositories.candidate_repo import CandidateRepository
from civic_align.schemas.candidate import (
    AlignmentResponse,
    CandidateResponse,
    LeaderboardEntryOut,
)
from civic_align.services import alignment
from civic_align.services.leaderboard import LeaderboardEntry, leaderboard

router = APIRouter(prefix="/candidates", tags=["candidates"])
SessionDep = Annotated[Session, Depends(get_db)]


def _get_candidate_or_404(db: Session, candidate_id: str) -> Candidate:
    candidate = CandidateRepository(db).get(candidate_id)
    if candidate is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Candidate not found")
    return candidate


@router.get("/leaderboard", response_model=list[LeaderboardEntryOut])
async def get_leaderboard(
    db: SessionDep,
    sort: Literal["endorsements", "trending"] = "endorsements",
    limit: int = Query(50, ge=1, le=200),
    voter_id: str | None = None,
) -> list[LeaderboardEntry]:
    """Return approved candidates ranked by endorsements or trending score."""
    return leaderboard(db, sort=sort, limit=limit, voter_id=voter_id)


@router.get("/{candidate_id}", response_model=CandidateResponse)
async def get_candidate(candidate_id: str, db: SessionDep) -> Candidate:
    """Get a specific candidate by ID."""
    return _get_candidate_or_404(db, candidate_id)


@router.get("/{candidate_id}/alignment", response_model=AlignmentResponse)
async def get_alignment(
    candidate_id: str,
    voter_id: str,
    db: SessionDep,
) -> AlignmentResponse:
    """Score a candidate for a voter with the same formula the feed uses."""
    candidate = _get_candidate_or_404(db, candidate_id)
    prefs = db.get(VoterPreferences, voter_id)
    if prefs is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Voter not found")

    result = alignment.score(
        prefs.selected_issues,
        prefs.dealbreakers,
        candidate.positions,
        dealbreaker_threshold=settings.dealbreaker_spectrum_threshold,
    )
    return AlignmentResponse(
        candidate_id=candidate.id,
        voter_id=voter_id,
        score=result.score,
        matched_issues=sorted(result.matched_issues),
        has_dealbreaker=result.has_dealbreaker,
    )
