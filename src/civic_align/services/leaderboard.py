"""Leaderboard views over approved candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from sqlalchemy.orm import Session

from civic_align.core.settings import settings
from civic_align.models import VoterPreferences
from civic_align.repositories.candidate_repo import CandidateRepository
from civic_align.services import alignment

LeaderboardSort = Literal["endorsements", "trending"]


@dataclass(frozen=True)
class LeaderboardEntry:
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


def leaderboard(
    db: Session,
    sort: LeaderboardSort = "endorsements",
    limit: int = 50,
    voter_id: str | None = None,
) -> list[LeaderboardEntry]:
    """Return approved candidates ranked by endorsements or trending.

    The endorsement board orders by the live counter; the trending board
    orders by the rank the trending job last stored. When ``voter_id`` has
    saved preferences each entry also carries that voter's alignment score.
    """
    repo = CandidateRepository(db)
    if sort == "trending":
        candidates = repo.list_by_trending(limit)
    else:
        candidates = repo.list_by_endorsements(limit)

    prefs = db.get(VoterPreferences, voter_id) if voter_id else None

    entries = []
    for index, candidate in enumerate(candidates, start=1):
        alignment_score = None
        if prefs is not None:
            alignment_score = alignment.score(
                prefs.selected_issues,
                prefs.dealbreakers,
                candidate.positions,
                dealbreaker_threshold=settings.dealbreaker_spectrum_threshold,
            ).score
        entries.append(
            LeaderboardEntry(
                rank=index,
                candidate_id=candidate.id,
                display_name=candidate.display_name,
                endorsement_count=candidate.endorsement_count,
                profile_views=candidate.profile_views,
                trending_score=candidate.trending_score,
                trending_rank=candidate.trending_rank,
                endorsement_rank=candidate.endorsement_rank,
                average_spectrum=candidate.average_spectrum,
                alignment_score=alignment_score,
            )
        )
    return entries
