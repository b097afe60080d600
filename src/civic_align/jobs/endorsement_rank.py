"""Hourly endorsement-count ranking."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from civic_align.jobs.base import BatchJob, JobReport
from civic_align.models import Candidate
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED
from civic_align.repositories.ranking_store import RankingStore

logger = logging.getLogger(__name__)


class EndorsementRankJob(BatchJob):
    """Stores each approved candidate's position by endorsement count."""

    name = "endorsement-rank"

    def recompute(self) -> JobReport:
        def read(db: Session) -> list[str]:
            result = db.execute(
                select(Candidate.id)
                .where(Candidate.status == CANDIDATE_STATUS_APPROVED)
                .order_by(Candidate.endorsement_count.desc(), Candidate.id)
            )
            return list(result.scalars())

        ordered = self.read_pool(read)
        report = JobReport(job=self.name)
        for rank, candidate_id in enumerate(ordered, start=1):
            self.checkpoint(
                report,
                candidate_id,
                lambda db, cid=candidate_id, r=rank: RankingStore(db).write_endorsement_rank(
                    cid, r
                ),
            )

        logger.info(
            "Endorsement ranks: %d updated, %d skipped, %d failed",
            report.updated,
            report.skipped,
            report.failed,
        )
        return report
