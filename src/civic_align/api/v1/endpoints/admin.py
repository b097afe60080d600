# src/civic_align/api/v1/endpoints/admin.py
"""Administrative endpoints: candidate review, contest stage and job triggers."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, sessionmaker

from civic_align.core.errors import CandidatePoolUnavailable, CivicAlignError
from civic_align.db.session import get_db, get_session_factory
from civic_align.jobs import (
    CutoffEliminationJob,
    CutoffRule,
    EndorsementRankJob,
    JobReport,
    TrendingScoreJob,
)
from civic_align.models import Candidate
from civic_align.schemas.admin import (
    ContestStageResponse,
    ContestStageUpdate,
    CutoffsUpdate,
    JobReportResponse,
    StatusChange,
)
from civic_align.schemas.candidate import CandidateResponse
from civic_align.services import candidate_status
from civic_align.services.contest import ContestService, set_cutoffs

from ..errors import http_error

router = APIRouter(prefix="/admin", tags=["admin"])
SessionDep = Annotated[Session, Depends(get_db)]
SessionFactoryDep = Annotated[sessionmaker, Depends(get_session_factory)]


def _report_response(report: JobReport) -> JobReportResponse:
    return JobReportResponse(
        job=report.job,
        processed=report.processed,
        updated=report.updated,
        skipped=report.skipped,
        failed_ids=list(report.failed_ids),
    )


def _pool_unavailable(exc: CandidatePoolUnavailable) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Candidate pool unavailable: {exc}",
    )


@router.post("/candidates/{candidate_id}/approve", response_model=CandidateResponse)
async def approve_candidate(candidate_id: str, db: SessionDep) -> Candidate:
    """Approve a pending candidate so they enter feeds and rankings."""
    try:
        return candidate_status.approve(db, candidate_id)
    except CivicAlignError as exc:
        raise http_error(exc) from exc


@router.post("/candidates/{candidate_id}/deny", response_model=CandidateResponse)
async def deny_candidate(
    candidate_id: str,
    db: SessionDep,
    data: StatusChange | None = None,
) -> Candidate:
    """Deny a pending candidate."""
    try:
        return candidate_status.deny(db, candidate_id, reason=data.reason if data else None)
    except CivicAlignError as exc:
        raise http_error(exc) from exc


@router.put("/cutoffs", response_model=CutoffsUpdate)
async def replace_cutoffs(data: CutoffsUpdate, db: SessionDep) -> CutoffsUpdate:
    """Replace the party's endorsement cutoff schedule."""
    rules = [CutoffRule(stage=c.stage, threshold=c.threshold) for c in data.cutoffs]
    config = set_cutoffs(db, rules)
    return CutoffsUpdate.model_validate(
        {
            "cutoffs": [
                {"stage": c.stage, "threshold": c.threshold} for c in config.endorsement_cutoffs
            ]
        }
    )


@router.post("/contest-stage", response_model=ContestStageResponse)
def change_contest_stage(
    data: ContestStageUpdate,
    db: SessionDep,
    session_factory: SessionFactoryDep,
) -> ContestStageResponse:
    """Move the contest to a new stage; entering voting applies the first cutoff."""
    try:
        change = ContestService(db, CutoffEliminationJob(session_factory)).change_stage(data.stage)
    except CandidatePoolUnavailable as exc:
        raise _pool_unavailable(exc) from exc
    return ContestStageResponse(
        previous_stage=change.previous_stage,
        stage=change.stage,
        eliminated=change.eliminated,
    )


@router.post("/jobs/trending", response_model=JobReportResponse)
def run_trending_job(
    session_factory: SessionFactoryDep,
    window_days: int | None = Query(None, ge=1, le=90),
) -> JobReportResponse:
    """Recompute trending scores and ranks now."""
    try:
        return _report_response(TrendingScoreJob(session_factory).recompute(window_days))
    except CandidatePoolUnavailable as exc:
        raise _pool_unavailable(exc) from exc


@router.post("/jobs/endorsement-rank", response_model=JobReportResponse)
def run_endorsement_rank_job(session_factory: SessionFactoryDep) -> JobReportResponse:
    """Recompute endorsement-count ranks now."""
    try:
        return _report_response(EndorsementRankJob(session_factory).recompute())
    except CandidatePoolUnavailable as exc:
        raise _pool_unavailable(exc) from exc


@router.post("/jobs/cutoff", response_model=JobReportResponse)
def run_cutoff_job(session_factory: SessionFactoryDep) -> JobReportResponse:
    """Apply the first configured endorsement cutoff now."""
    try:
        return _report_response(CutoffEliminationJob(session_factory).run())
    except CandidatePoolUnavailable as exc:
        raise _pool_unavailable(exc) from exc
