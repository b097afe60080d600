"""Daily rolling-window trending scores and ranks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session, sessionmaker

from civic_align.core.settings import settings
from civic_align.db.time import utcnow, utctoday
from civic_align.jobs.base import BatchJob, JobReport
from civic_align.repositories.candidate_repo import CandidateRepository
from civic_align.repositories.ranking_store import RankingStore

logger = logging.getLogger(__name__)


def trending_score(
    views: int,
    endorsements: int,
    view_weight: int = 1,
    endorsement_weight: int = 5,
) -> int:
    return views * view_weight + endorsements * endorsement_weight


def rank_scores(scores: dict[str, int]) -> list[tuple[str, int, int]]:
    """Order by score descending then id, returning ``(candidate_id, score, rank)``."""
    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [(cid, score, rank) for rank, (cid, score) in enumerate(ordered, start=1)]


class TrendingScoreJob(BatchJob):
    """Recomputes every approved candidate's trending score and rank.

    All scores are computed before any rank is written, and each candidate's
    score and rank are stored in a single update. A crash part-way leaves
    some candidates with the previous day's values until the next run.
    """

    name = "trending"

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        today: Callable[[], date] = utctoday,
        clock: Callable[[], datetime] = utcnow,
        view_weight: int | None = None,
        endorsement_weight: int | None = None,
    ) -> None:
        super().__init__(session_factory)
        self.today = today
        self.clock = clock
        self.view_weight = settings.trending_view_weight if view_weight is None else view_weight
        self.endorsement_weight = (
            settings.trending_endorsement_weight
            if endorsement_weight is None
            else endorsement_weight
        )

    def recompute(self, window_days: int | None = None) -> JobReport:
        """Score the ``[today - window_days, today]`` window and re-rank.

        Raises:
            CandidatePoolUnavailable: If the approved pool or its metrics cannot be read.
        """
        window = settings.trending_window_days if window_days is None else window_days
        if window < 0:
            raise ValueError("window_days must not be negative")
        end = self.today()
        start = end - timedelta(days=window)

        def read(db: Session) -> tuple[list[str], dict[str, tuple[int, int]]]:
            repo = CandidateRepository(db)
            ids = repo.list_approved_ids()
            return ids, repo.metrics_totals(start, end, ids)

        candidate_ids, totals = self.read_pool(read)
        scores = {
            cid: trending_score(
                *totals.get(cid, (0, 0)),
                view_weight=self.view_weight,
                endorsement_weight=self.endorsement_weight,
            )
            for cid in candidate_ids
        }

        report = JobReport(job=self.name)
        computed_at = self.clock()
        for candidate_id, score, rank in rank_scores(scores):
            self.checkpoint(
                report,
                candidate_id,
                lambda db, cid=candidate_id, s=score, r=rank: RankingStore(db).write_trending(
                    cid, score=s, rank=r, computed_at=computed_at
                ),
            )

        logger.info(
            "Trending scores for %s..%s: %d updated, %d skipped, %d failed",
            start.isoformat(),
            end.isoformat(),
            report.updated,
            report.skipped,
            report.failed,
        )
        return report
