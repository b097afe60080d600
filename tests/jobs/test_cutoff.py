# tests/jobs/test_cutoff.py
"""Tests for the endorsement cutoff elimination job."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from civic_align.core.errors import CandidatePoolUnavailable
from civic_align.jobs.cutoff import CutoffEliminationJob, CutoffRule
from civic_align.models import DomainEvent
from civic_align.models.candidate import (
    CANDIDATE_STATUS_APPROVED,
    CANDIDATE_STATUS_ELIMINATED,
    CANDIDATE_STATUS_PENDING,
)
from civic_align.services.contest import set_cutoffs
from civic_align.services.feed import FeedAssembler
from civic_align.services.leaderboard import leaderboard


@pytest.fixture()
def job(session_factory) -> CutoffEliminationJob:
    return CutoffEliminationJob(session_factory)


@pytest.fixture()
def contest_pool(make_candidate):
    for candidate_id, count in (("c1200", 1200), ("c900", 900), ("c1000", 1000), ("c500", 500)):
        make_candidate(candidate_id, endorsement_count=count, positions=[("healthcare", 1, 0)])


@pytest.mark.usefixtures("contest_pool")
def test_threshold_is_exclusive(job, reload) -> None:
    eliminated = job.apply([{"stage": 1, "threshold": 1000}])

    assert eliminated == 2
    statuses = {cid: reload(cid).status for cid in ("c1200", "c900", "c1000", "c500")}
    assert statuses == {
        "c1200": CANDIDATE_STATUS_APPROVED,
        "c900": CANDIDATE_STATUS_ELIMINATED,
        "c1000": CANDIDATE_STATUS_APPROVED,
        "c500": CANDIDATE_STATUS_ELIMINATED,
    }
    assert reload("c900").elimination_reason == "Below endorsement threshold of 1000"
    assert reload("c900").eliminated_at is not None


@pytest.mark.usefixtures("contest_pool")
def test_second_run_is_idempotent(job, reload) -> None:
    job.apply([CutoffRule(1, 1000)])

    assert job.apply([CutoffRule(1, 1000)]) == 0
    assert reload("c900").status == CANDIDATE_STATUS_ELIMINATED


@pytest.mark.usefixtures("contest_pool")
def test_only_first_stage_is_applied(job, reload) -> None:
    eliminated = job.apply([CutoffRule(2, 5000), CutoffRule(1, 600)])

    assert eliminated == 1
    assert reload("c500").status == CANDIDATE_STATUS_ELIMINATED
    assert reload("c900").status == CANDIDATE_STATUS_APPROVED


@pytest.mark.usefixtures("contest_pool")
def test_no_cutoffs_eliminates_nothing(job, reload) -> None:
    assert job.apply([]) == 0
    assert reload("c500").status == CANDIDATE_STATUS_APPROVED


def test_non_approved_candidates_are_untouched(job, make_candidate, reload) -> None:
    make_candidate("pending", status=CANDIDATE_STATUS_PENDING, endorsement_count=0)

    assert job.apply([CutoffRule(1, 10)]) == 0
    assert reload("pending").status == CANDIDATE_STATUS_PENDING


@pytest.mark.usefixtures("contest_pool")
def test_eliminations_record_events(job, db_session) -> None:
    job.apply([CutoffRule(1, 1000)])

    events = db_session.execute(select(DomainEvent).order_by(DomainEvent.aggregate_id)).scalars()
    assert [(e.aggregate_id, e.payload["to"]) for e in events] == [
        ("c500", CANDIDATE_STATUS_ELIMINATED),
        ("c900", CANDIDATE_STATUS_ELIMINATED),
    ]


@pytest.mark.usefixtures("contest_pool")
def test_run_uses_configured_cutoffs(job, db_session, reload) -> None:
    set_cutoffs(db_session, [CutoffRule(1, 1000)])

    report = job.run()

    assert report.updated == 2
    assert report.processed == 2
    assert report.failed == 0


@pytest.mark.usefixtures("contest_pool")
def test_eliminated_candidates_leave_feed_and_leaderboard(
    job, db_session, make_voter
) -> None:
    make_voter("voter-1", selected_issues=["healthcare"])
    job.apply([CutoffRule(1, 1000)])
    db_session.expire_all()

    feed_ids = {i.candidate_id for i in FeedAssembler().build_for_voter(db_session, "voter-1").items}
    board_ids = [e.candidate_id for e in leaderboard(db_session)]

    assert feed_ids == {"c1200", "c1000"}
    assert board_ids == ["c1200", "c1000"]


@pytest.mark.usefixtures("contest_pool")
def test_failed_candidate_does_not_stop_the_run(job, mocker, reload) -> None:
    real_eliminate = job._eliminate

    def flaky(db, candidate_id, threshold, reason):
        if candidate_id == "c500":
            raise OperationalError("UPDATE candidate", {}, Exception("disk I/O error"))
        return real_eliminate(db, candidate_id, threshold, reason)

    mocker.patch.object(job, "_eliminate", side_effect=flaky)

    report = job.execute([CutoffRule(1, 1000)])

    assert report.failed_ids == ["c500"]
    assert report.updated == 1
    assert reload("c900").status == CANDIDATE_STATUS_ELIMINATED
    assert reload("c500").status == CANDIDATE_STATUS_APPROVED


def test_unreadable_pool_fails_the_job(job, mocker) -> None:
    mocker.patch(
        "civic_align.jobs.cutoff.CandidateRepository.list_below_threshold",
        side_effect=OperationalError("SELECT", {}, Exception("no such table")),
    )

    with pytest.raises(CandidatePoolUnavailable):
        job.apply([CutoffRule(1, 1000)])
