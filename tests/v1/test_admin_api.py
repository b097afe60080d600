"""Tests for administrative endpoints."""

import asyncio
from datetime import timedelta

from fastapi import status

from civic_align.db.time import utctoday
from civic_align.jobs.base import JobReport
from civic_align.jobs.cutoff import CutoffEliminationJob
from civic_align.models.candidate import (
    CANDIDATE_STATUS_APPROVED,
    CANDIDATE_STATUS_DENIED,
    CANDIDATE_STATUS_ELIMINATED,
    CANDIDATE_STATUS_PENDING,
)


def test_approve_pending_candidate(client, make_candidate) -> None:
    make_candidate("cand-1", status=CANDIDATE_STATUS_PENDING)

    response = client.post("/api/v1/admin/candidates/cand-1/approve")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == CANDIDATE_STATUS_APPROVED


def test_deny_with_reason(client, make_candidate) -> None:
    make_candidate("cand-1", status=CANDIDATE_STATUS_PENDING)

    response = client.post(
        "/api/v1/admin/candidates/cand-1/deny", json={"reason": "Incomplete filing"}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == CANDIDATE_STATUS_DENIED


def test_illegal_transition_conflicts(client, make_candidate) -> None:
    make_candidate("cand-1", status=CANDIDATE_STATUS_ELIMINATED)

    response = client.post("/api/v1/admin/candidates/cand-1/approve")

    assert response.status_code == status.HTTP_409_CONFLICT


def test_approve_missing_candidate(client) -> None:
    response = client.post("/api/v1/admin/candidates/missing/approve")

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_contest_stage_triggers_cutoff(client, make_candidate, reload) -> None:
    make_candidate("strong", endorsement_count=1200)
    make_candidate("weak", endorsement_count=900)
    client.put("/api/v1/admin/cutoffs", json={"cutoffs": [{"stage": 1, "threshold": 1000}]})

    response = client.post("/api/v1/admin/contest-stage", json={"stage": "voting"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "previous_stage": "pre_nomination",
        "stage": "voting",
        "eliminated": 1,
    }
    assert reload("weak").status == CANDIDATE_STATUS_ELIMINATED
    assert reload("strong").status == CANDIDATE_STATUS_APPROVED


def test_contest_stage_rejects_unknown_stage(client) -> None:
    response = client.post("/api/v1/admin/contest-stage", json={"stage": "coronation"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_replace_cutoffs_returns_ordered_schedule(client) -> None:
    response = client.put(
        "/api/v1/admin/cutoffs",
        json={"cutoffs": [{"stage": 2, "threshold": 4000}, {"stage": 1, "threshold": 1000}]},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["cutoffs"] == [
        {"stage": 1, "threshold": 1000},
        {"stage": 2, "threshold": 4000},
    ]


def test_trending_job_endpoint(client, make_candidate, record_metrics, reload) -> None:
    make_candidate("cand-1")
    record_metrics("cand-1", utctoday() - timedelta(days=1), views=12, endorsements=2)

    response = client.post("/api/v1/admin/jobs/trending")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "job": "trending",
        "processed": 1,
        "updated": 1,
        "skipped": 0,
        "failed_ids": [],
    }
    assert reload("cand-1").trending_score == 22
    assert reload("cand-1").trending_rank == 1


def test_endorsement_rank_job_endpoint(client, make_candidate, reload) -> None:
    make_candidate("a", endorsement_count=1)
    make_candidate("b", endorsement_count=2)

    response = client.post("/api/v1/admin/jobs/endorsement-rank")

    assert response.json()["updated"] == 2
    assert reload("b").endorsement_rank == 1


def test_cutoff_job_endpoint_without_config(client, make_candidate) -> None:
    make_candidate("cand-1")

    response = client.post("/api/v1/admin/jobs/cutoff")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["updated"] == 0


def _on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def test_job_endpoints_run_off_the_event_loop(client, mocker) -> None:
    seen: list[bool] = []

    def fake_run(self) -> JobReport:
        seen.append(_on_event_loop())
        return JobReport(job="cutoff")

    mocker.patch.object(CutoffEliminationJob, "run", fake_run)

    response = client.post("/api/v1/admin/jobs/cutoff")

    assert response.status_code == status.HTTP_200_OK
    assert seen == [False]
