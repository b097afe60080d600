"""Tests for contest stage changes and the cutoff they trigger."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from civic_align.core.errors import CandidatePoolUnavailable
from civic_align.jobs.cutoff import CutoffEliminationJob, CutoffRule
from civic_align.models import DomainEvent
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED, CANDIDATE_STATUS_ELIMINATED
from civic_align.models.event import EVENT_CONTEST_STAGE_CHANGED
from civic_align.services.contest import ContestService, get_party_config, set_cutoffs


@pytest.fixture()
def service(db_session, session_factory) -> ContestService:
    return ContestService(db_session, CutoffEliminationJob(session_factory))


def test_default_config_is_created(db_session) -> None:
    config = get_party_config(db_session)

    assert config.contest_stage == "pre_nomination"
    assert config.endorsement_cutoffs == []


def test_set_cutoffs_orders_by_stage_and_replaces(db_session) -> None:
    set_cutoffs(db_session, [CutoffRule(2, 5000), CutoffRule(1, 1000)])
    config = set_cutoffs(db_session, [CutoffRule(1, 800), CutoffRule(2, 4000)])

    assert [(c.stage, c.threshold) for c in config.endorsement_cutoffs] == [(1, 800), (2, 4000)]


def test_entering_voting_applies_first_cutoff(service, db_session, make_candidate, reload) -> None:
    make_candidate("keep", endorsement_count=1500)
    make_candidate("drop", endorsement_count=200)
    set_cutoffs(db_session, [CutoffRule(1, 1000), CutoffRule(2, 3000)])
    service.change_stage("nomination")

    change = service.change_stage("voting")

    assert change.previous_stage == "nomination"
    assert change.eliminated == 1
    assert reload("keep").status == CANDIDATE_STATUS_APPROVED
    assert reload("drop").status == CANDIDATE_STATUS_ELIMINATED


def test_other_stages_do_not_eliminate(service, db_session, make_candidate, reload) -> None:
    make_candidate("low", endorsement_count=0)
    set_cutoffs(db_session, [CutoffRule(1, 1000)])

    change = service.change_stage("nomination")

    assert change.eliminated is None
    assert reload("low").status == CANDIDATE_STATUS_APPROVED


def test_same_stage_is_noop(service, db_session) -> None:
    service.change_stage("nomination")
    change = service.change_stage("nomination")

    assert change.previous_stage == change.stage == "nomination"
    events = db_session.execute(
        select(DomainEvent).where(DomainEvent.event_type == EVENT_CONTEST_STAGE_CHANGED)
    ).scalars().all()
    assert len(events) == 1


def test_unknown_stage_is_rejected(service) -> None:
    with pytest.raises(ValueError):
        service.change_stage("coronation")


def test_voting_retry_eliminates_after_pool_outage(
    service, db_session, make_candidate, reload, mocker
) -> None:
    make_candidate("drop", endorsement_count=1)
    set_cutoffs(db_session, [CutoffRule(1, 1000)])
    service.change_stage("nomination")
    read_pool = service.cutoff_job.read_pool
    calls: list[object] = []

    def flaky_read_pool(reader):
        calls.append(reader)
        if len(calls) == 1:
            raise CandidatePoolUnavailable("candidate pool offline")
        return read_pool(reader)

    mocker.patch.object(service.cutoff_job, "read_pool", side_effect=flaky_read_pool)

    with pytest.raises(CandidatePoolUnavailable):
        service.change_stage("voting")
    assert get_party_config(db_session).contest_stage == "nomination"

    change = service.change_stage("voting")

    assert change.previous_stage == "nomination"
    assert change.eliminated == 1
    assert get_party_config(db_session).contest_stage == "voting"
    assert reload("drop").status == CANDIDATE_STATUS_ELIMINATED
