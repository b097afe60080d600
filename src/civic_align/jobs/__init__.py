"""Scheduler-invoked batch jobs."""

from .base import JobReport
from .cutoff import CutoffEliminationJob, CutoffRule
from .endorsement_rank import EndorsementRankJob
from .trending import TrendingScoreJob

__all__ = [
    "CutoffEliminationJob",
    "CutoffRule",
    "EndorsementRankJob",
    "JobReport",
    "TrendingScoreJob",
]
