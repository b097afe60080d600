# src/civic_align/jobs/run_job.py
"""Command-line entry point the scheduler uses to run a batch job."""
from __future__ import annotations

import argparse
import logging
import sys

from civic_align.core.errors import CandidatePoolUnavailable
from civic_align.core.logging_config import configure_logging
from civic_align.core.settings import settings
from civic_align.jobs.base import JobReport
from civic_align.jobs.cutoff import CutoffEliminationJob
from civic_align.jobs.endorsement_rank import EndorsementRankJob
from civic_align.jobs.trending import TrendingScoreJob

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a Civic Align batch job once.")
    sub = parser.add_subparsers(dest="job", required=True)

    trending = sub.add_parser("trending", help="Recompute trending scores and ranks")
    trending.add_argument(
        "--window-days",
        type=int,
        default=settings.trending_window_days,
        help="Rolling window size in days",
    )
    sub.add_parser("endorsement-rank", help="Recompute endorsement-count ranks")
    sub.add_parser("cutoff", help="Apply the first configured endorsement cutoff")
    return parser


def run(job: str, window_days: int | None = None) -> JobReport:
    """Run ``job`` with default collaborators and return its report."""
    if job == "trending":
        return TrendingScoreJob().recompute(window_days)
    if job == "endorsement-rank":
        return EndorsementRankJob().recompute()
    if job == "cutoff":
        return CutoffEliminationJob().run()
    raise ValueError(f"Unknown job: {job}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)
    try:
        report = run(args.job, getattr(args, "window_days", None))
    except CandidatePoolUnavailable:
        logger.error("Job %s aborted: candidate pool unavailable", args.job)
        return 1
    print(
        f"{report.job}: processed={report.processed} updated={report.updated} "
        f"skipped={report.skipped} failed={report.failed}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
