"""Contest stage transitions and the cutoff they trigger."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from civic_align.core.settings import settings
from civic_align.jobs.cutoff import CutoffEliminationJob, CutoffRule
from civic_align.models import EndorsementCutoff, PartyConfig
from civic_align.models.event import EVENT_CONTEST_STAGE_CHANGED
from civic_align.models.party import CONTEST_STAGES
from civic_align.services.events import record_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageChange:
    previous_stage: str
    stage: str
    eliminated: int | None = None


def get_party_config(db: Session) -> PartyConfig:
    """Return the singleton party config, creating a default row if missing."""
    config = db.execute(
        select(PartyConfig).options(selectinload(PartyConfig.endorsement_cutoffs)).limit(1)
    ).scalars().first()
    if config is None:
        config = PartyConfig(id=1)
        db.add(config)
        db.commit()
        db.refresh(config)
    return config


def set_cutoffs(db: Session, cutoffs: Sequence[CutoffRule]) -> PartyConfig:
    """Replace the configured endorsement cutoffs."""
    config = get_party_config(db)
    # Old rows must be gone before new ones reuse their stage numbers.
    config.endorsement_cutoffs.clear()
    db.flush()
    config.endorsement_cutoffs = [
        EndorsementCutoff(stage=rule.stage, threshold=rule.threshold)
        for rule in sorted(cutoffs, key=lambda r: r.stage)
    ]
    db.commit()
    db.refresh(config)
    return config


class ContestService:
    """Moves the contest between stages and fires stage-bound jobs."""

    def __init__(self, db: Session, cutoff_job: CutoffEliminationJob | None = None) -> None:
        self.db = db
        self.cutoff_job = cutoff_job or CutoffEliminationJob()

    def change_stage(self, stage: str) -> StageChange:
        """Persist ``stage`` and, when it closes nomination, apply the first cutoff.

        The cutoff runs before the new stage is saved. If the candidate pool
        cannot be read the stage stays where it was, so calling again with
        the same stage retries the elimination.

        Raises:
            ValueError: If ``stage`` is not a known contest stage.
            CandidatePoolUnavailable: If the cutoff cannot read the pool.
        """
        if stage not in CONTEST_STAGES:
            raise ValueError(f"Unknown contest stage: {stage}")

        config = get_party_config(self.db)
        previous = config.contest_stage
        cutoffs = [CutoffRule.coerce(c) for c in config.endorsement_cutoffs]
        if previous == stage:
            return StageChange(previous_stage=previous, stage=stage)

        eliminated = None
        if stage == settings.cutoff_trigger_stage:
            eliminated = self.cutoff_job.apply(cutoffs)

        config.contest_stage = stage
        record_event(
            self.db,
            EVENT_CONTEST_STAGE_CHANGED,
            "contest",
            {"from": previous, "to": stage},
        )
        self.db.commit()
        logger.info("Contest stage changed from %s to %s", previous, stage)
        return StageChange(previous_stage=previous, stage=stage, eliminated=eliminated)
