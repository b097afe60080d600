"""Endorsement cutoff elimination, run when the contest closes nomination."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload, sessionmaker

from civic_align.db.time import utcnow
from civic_align.jobs.base import BatchJob, JobReport
from civic_align.models import Candidate, PartyConfig
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED, CANDIDATE_STATUS_ELIMINATED
from civic_align.models.event import EVENT_CANDIDATE_STATUS_CHANGED
from civic_align.repositories.candidate_repo import CandidateRepository
from civic_align.services.events import record_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CutoffRule:
    stage: int
    threshold: int

    @classmethod
    def coerce(cls, value: Any) -> CutoffRule:
        """Build a rule from a mapping or any object with stage/threshold attributes."""
        if isinstance(value, CutoffRule):
            return value
        if isinstance(value, Mapping):
            return cls(stage=int(value["stage"]), threshold=int(value["threshold"]))
        return cls(stage=int(value.stage), threshold=int(value.threshold))


def load_configured_cutoffs(db: Session) -> list[CutoffRule]:
    """Return the party's cutoffs ordered by stage, empty if unconfigured."""
    config = db.execute(
        select(PartyConfig).options(selectinload(PartyConfig.endorsement_cutoffs)).limit(1)
    ).scalars().first()
    if config is None:
        return []
    return [CutoffRule.coerce(c) for c in config.endorsement_cutoffs]


class CutoffEliminationJob(BatchJob):
    """Eliminates approved candidates below the first-stage endorsement threshold.

    Only ``cutoffs[0]`` is applied; later stages are kept for future phases.
    The job is idempotent: already-eliminated candidates are skipped and the
    status write is conditional on the candidate still qualifying, so a
    retried or interrupted run converges on the same end state.
    """

    name = "cutoff"

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(session_factory)
        self.clock = clock

    def apply(self, cutoffs: Sequence[Any]) -> int:
        """Apply the first cutoff and return how many candidates were eliminated."""
        return self.execute(cutoffs).updated

    def run(self) -> JobReport:
        """Apply the cutoffs stored in the party configuration."""
        cutoffs = self.read_pool(load_configured_cutoffs)
        return self.execute(cutoffs)

    def execute(self, cutoffs: Sequence[Any]) -> JobReport:
        report = JobReport(job=self.name)
        rules = sorted((CutoffRule.coerce(c) for c in cutoffs), key=lambda r: r.stage)
        if not rules:
            logger.info("No endorsement cutoffs configured; nothing to eliminate")
            return report

        threshold = rules[0].threshold
        below = self.read_pool(lambda db: CandidateRepository(db).list_below_threshold(threshold))
        reason = f"Below endorsement threshold of {threshold}"

        for candidate_id in below:
            self.checkpoint(
                report,
                candidate_id,
                lambda db, cid=candidate_id: self._eliminate(db, cid, threshold, reason),
            )

        logger.info(
            "Cutoff %d (stage %d): %d eliminated, %d skipped, %d failed",
            threshold,
            rules[0].stage,
            report.updated,
            report.skipped,
            report.failed,
        )
        return report

    def _eliminate(self, db: Session, candidate_id: str, threshold: int, reason: str) -> bool:
        result = db.execute(
            update(Candidate)
            .where(
                Candidate.id == candidate_id,
                Candidate.status == CANDIDATE_STATUS_APPROVED,
                Candidate.endorsement_count < threshold,
            )
            .values(
                status=CANDIDATE_STATUS_ELIMINATED,
                eliminated_at=self.clock(),
                elimination_reason=reason,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        record_event(
            db,
            EVENT_CANDIDATE_STATUS_CHANGED,
            candidate_id,
            {
                "from": CANDIDATE_STATUS_APPROVED,
                "to": CANDIDATE_STATUS_ELIMINATED,
                "reason": reason,
            },
        )
        return True
