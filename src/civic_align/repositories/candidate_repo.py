"""Data access helpers for working with candidates."""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from civic_align.models import PSA, Candidate, ProfileMetricsDay
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED
from civic_align.models.psa import PSA_STATUS_PUBLISHED

__all__ = ["CandidateRepository"]


class CandidateRepository:
    """Thin wrapper around indexed queries over candidate records."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, candidate_id: str) -> Candidate | None:
        """Return a candidate by identifier with positions loaded."""
        result = self.session.execute(
            select(Candidate)
            .options(selectinload(Candidate.positions))
            .where(Candidate.id == candidate_id)
        )
        return result.scalars().first()

    def list_approved(self, limit: int | None = None) -> list[Candidate]:
        """Return approved candidates and their positions ordered by id."""
        stmt = (
            select(Candidate)
            .options(selectinload(Candidate.positions))
            .where(Candidate.status == CANDIDATE_STATUS_APPROVED)
            .order_by(Candidate.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def list_approved_ids(self) -> list[str]:
        """Return ids of all approved candidates ordered by id."""
        result = self.session.execute(
            select(Candidate.id)
            .where(Candidate.status == CANDIDATE_STATUS_APPROVED)
            .order_by(Candidate.id)
        )
        return list(result.scalars())

    def list_below_threshold(self, threshold: int) -> list[str]:
        """Return ids of approved candidates with fewer endorsements than ``threshold``."""
        result = self.session.execute(
            select(Candidate.id)
            .where(
                Candidate.status == CANDIDATE_STATUS_APPROVED,
                Candidate.endorsement_count < threshold,
            )
            .order_by(Candidate.id)
        )
        return list(result.scalars())

    def list_by_endorsements(self, limit: int | None = None) -> list[Candidate]:
        """Return approved candidates by live endorsement count, highest first."""
        stmt = (
            select(Candidate)
            .options(selectinload(Candidate.positions))
            .where(Candidate.status == CANDIDATE_STATUS_APPROVED)
            .order_by(Candidate.endorsement_count.desc(), Candidate.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def list_by_trending(self, limit: int | None = None) -> list[Candidate]:
        """Return approved candidates by last computed trending rank.

        Candidates the trending job has not scored yet sort last.
        """
        stmt = (
            select(Candidate)
            .options(selectinload(Candidate.positions))
            .where(Candidate.status == CANDIDATE_STATUS_APPROVED)
            .order_by(
                Candidate.trending_rank.is_(None),
                Candidate.trending_rank,
                Candidate.id,
            )
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def published_psa_issues(self, candidate_ids: Sequence[str]) -> dict[str, set[str]]:
        """Return issue ids covered by each candidate's published PSAs."""
        if not candidate_ids:
            return {}
        result = self.session.execute(
            select(PSA.candidate_id, PSA.issue_ids).where(
                PSA.candidate_id.in_(candidate_ids),
                PSA.status == PSA_STATUS_PUBLISHED,
            )
        )
        issues: dict[str, set[str]] = defaultdict(set)
        for candidate_id, issue_ids in result:
            issues[candidate_id].update(issue_ids or ())
        return dict(issues)

    def metrics_totals(
        self,
        start: date,
        end: date,
        candidate_ids: Iterable[str] | None = None,
    ) -> dict[str, tuple[int, int]]:
        """Sum views and endorsements received per candidate over ``[start, end]``.

        Returns:
            Mapping of candidate id to ``(profile_views, endorsements_received)``.
            Candidates without rows in the window are absent.
        """
        stmt = (
            select(
                ProfileMetricsDay.candidate_id,
                func.coalesce(func.sum(ProfileMetricsDay.profile_views), 0),
                func.coalesce(func.sum(ProfileMetricsDay.endorsements_received), 0),
            )
            .where(
                ProfileMetricsDay.metric_date >= start,
                ProfileMetricsDay.metric_date <= end,
            )
            .group_by(ProfileMetricsDay.candidate_id)
        )
        if candidate_ids is not None:
            stmt = stmt.where(ProfileMetricsDay.candidate_id.in_(list(candidate_ids)))
        return {
            candidate_id: (int(views), int(endorsements))
            for candidate_id, views, endorsements in self.session.execute(stmt)
        }
