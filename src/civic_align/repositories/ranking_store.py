"""Persistence for derived ranking values read by feeds and leaderboards."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from civic_align.db.time import utcnow
from civic_align.models import Candidate
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED

__all__ = ["RankingSnapshot", "RankingStore"]


@dataclass(frozen=True)
class RankingSnapshot:
    """Last computed ranking values for one candidate."""

    candidate_id: str
    endorsement_rank: int | None
    trending_score: int | None
    trending_rank: int | None
    trending_computed_at: datetime | None


class RankingStore:
    """Reads and writes the derived rank columns on candidate records.

    Each write is a single UPDATE so a candidate's score and rank always
    change together. Writes only touch approved candidates; a candidate
    eliminated mid-run keeps whatever it had.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def write_trending(
        self,
        candidate_id: str,
        *,
        score: int,
        rank: int,
        computed_at: datetime | None = None,
    ) -> bool:
        """Store a trending score and rank for one candidate.

        Returns:
            True if the candidate was approved and the row was updated.
        """
        result = self.session.execute(
            update(Candidate)
            .where(
                Candidate.id == candidate_id,
                Candidate.status == CANDIDATE_STATUS_APPROVED,
            )
            .values(
                trending_score=score,
                trending_rank=rank,
                trending_computed_at=computed_at or utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def write_endorsement_rank(self, candidate_id: str, rank: int) -> bool:
        """Store the endorsement-count rank for one candidate."""
        result = self.session.execute(
            update(Candidate)
            .where(
                Candidate.id == candidate_id,
                Candidate.status == CANDIDATE_STATUS_APPROVED,
            )
            .values(endorsement_rank=rank)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def snapshot(self, candidate_id: str) -> RankingSnapshot | None:
        """Return the stored ranking values for a candidate."""
        row = self.session.execute(
            select(
                Candidate.id,
                Candidate.endorsement_rank,
                Candidate.trending_score,
                Candidate.trending_rank,
                Candidate.trending_computed_at,
            ).where(Candidate.id == candidate_id)
        ).first()
        if row is None:
            return None
        return RankingSnapshot(*row)
