# src/civic_align/schemas/admin.py
"""Admin and job-control Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field

ContestStage = Literal["pre_nomination", "nomination", "voting", "post_election"]


class ContestStageUpdate(BaseModel):
    stage: ContestStage


class ContestStageResponse(BaseModel):
    previous_stage: str
    stage: str
    eliminated: int | None = Field(
        None, description="Candidates eliminated by the cutoff this transition triggered"
    )


class CutoffIn(BaseModel):
    stage: int = Field(..., ge=1)
    threshold: int = Field(..., ge=0)


class CutoffsUpdate(BaseModel):
    cutoffs: list[CutoffIn]


class StatusChange(BaseModel):
    reason: str | None = None


class JobReportResponse(BaseModel):
    job: str
    processed: int
    updated: int
    skipped: int
    failed_ids: list[str]
