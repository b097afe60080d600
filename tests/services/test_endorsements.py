"""Tests for the endorsement ledger."""

from __future__ import annotations

import threading

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from civic_align.core.errors import (
    AlreadyEndorsed,
    CandidateNotEndorsable,
    CandidateNotFound,
    CounterUnderflow,
    StoreUnavailable,
)
from civic_align.db.session import Base, build_engine
from civic_align.models import Candidate, DomainEvent, Endorsement
from civic_align.models.candidate import CANDIDATE_STATUS_ELIMINATED, CANDIDATE_STATUS_PENDING
from civic_align.models.event import EVENT_ENDORSEMENT_CREATED, EVENT_ENDORSEMENT_REVOKED
from civic_align.services.endorsements import EndorsementLedger


def _active_count(db, candidate_id: str) -> int:
    return db.execute(
        select(func.count())
        .select_from(Endorsement)
        .where(Endorsement.candidate_id == candidate_id, Endorsement.is_active.is_(True))
    ).scalar_one()


@pytest.fixture()
def ledger(db_session) -> EndorsementLedger:
    return EndorsementLedger(db_session, max_retries=0)


def test_endorse_increments_counter(ledger, db_session, make_candidate, reload) -> None:
    make_candidate("cand-1", endorsement_count=4)

    endorsement = ledger.endorse("voter-1", "cand-1")

    assert endorsement.is_active is True
    assert endorsement.voter_id == "voter-1"
    assert reload("cand-1").endorsement_count == 5
    assert _active_count(db_session, "cand-1") == 1


def test_has_active_reads_own_writes(ledger, make_candidate) -> None:
    make_candidate("cand-1")

    assert ledger.has_active("voter-1", "cand-1") is False
    ledger.endorse("voter-1", "cand-1")
    assert ledger.has_active("voter-1", "cand-1") is True
    ledger.revoke("voter-1", "cand-1")
    assert ledger.has_active("voter-1", "cand-1") is False


def test_duplicate_endorsement_is_rejected(ledger, db_session, make_candidate, reload) -> None:
    make_candidate("cand-1")
    ledger.endorse("voter-1", "cand-1")

    with pytest.raises(AlreadyEndorsed):
        ledger.endorse("voter-1", "cand-1")

    assert reload("cand-1").endorsement_count == 1
    assert _active_count(db_session, "cand-1") == 1


def test_revoke_without_endorsement_is_noop(ledger, make_candidate, reload) -> None:
    make_candidate("cand-1", endorsement_count=3)

    assert ledger.revoke("voter-1", "cand-1") is False
    assert reload("cand-1").endorsement_count == 3


def test_endorse_revoke_endorse_leaves_one_active(
    ledger, db_session, make_candidate, reload
) -> None:
    make_candidate("cand-1", endorsement_count=10)

    ledger.endorse("voter-1", "cand-1")
    assert ledger.revoke("voter-1", "cand-1") is True
    assert reload("cand-1").endorsement_count == 10
    ledger.endorse("voter-1", "cand-1")

    assert reload("cand-1").endorsement_count == 11
    assert _active_count(db_session, "cand-1") == 1
    history = db_session.execute(
        select(func.count()).select_from(Endorsement).where(Endorsement.voter_id == "voter-1")
    ).scalar_one()
    assert history == 2


def test_revoke_refuses_counter_underflow(ledger, db_session, make_candidate, reload) -> None:
    make_candidate("cand-1")
    ledger.endorse("voter-1", "cand-1")
    # Simulate a counter that drifted to zero underneath an active endorsement.
    db_session.execute(
        update(Candidate).where(Candidate.id == "cand-1").values(endorsement_count=0)
    )
    db_session.commit()

    with pytest.raises(CounterUnderflow):
        ledger.revoke("voter-1", "cand-1")

    assert reload("cand-1").endorsement_count == 0
    assert ledger.has_active("voter-1", "cand-1") is True


def test_endorse_unknown_candidate(ledger) -> None:
    with pytest.raises(CandidateNotFound):
        ledger.endorse("voter-1", "missing")


@pytest.mark.parametrize("status", [CANDIDATE_STATUS_PENDING, CANDIDATE_STATUS_ELIMINATED])
def test_endorse_requires_approved_candidate(
    ledger, db_session, make_candidate, reload, status
) -> None:
    make_candidate("cand-1", status=status)

    with pytest.raises(CandidateNotEndorsable):
        ledger.endorse("voter-1", "cand-1")

    assert reload("cand-1").endorsement_count == 0
    assert _active_count(db_session, "cand-1") == 0


def test_revoke_after_elimination_still_decrements(
    ledger, db_session, make_candidate, reload
) -> None:
    make_candidate("cand-1")
    ledger.endorse("voter-1", "cand-1")
    db_session.execute(
        update(Candidate)
        .where(Candidate.id == "cand-1")
        .values(status=CANDIDATE_STATUS_ELIMINATED)
    )
    db_session.commit()

    assert ledger.revoke("voter-1", "cand-1") is True
    assert reload("cand-1").endorsement_count == 0


def test_mutations_append_outbox_events(ledger, db_session, make_candidate) -> None:
    make_candidate("cand-1")
    ledger.endorse("voter-1", "cand-1")
    ledger.revoke("voter-1", "cand-1")

    events = db_session.execute(
        select(DomainEvent).where(DomainEvent.aggregate_id == "cand-1").order_by(DomainEvent.id)
    ).scalars().all()

    assert [e.event_type for e in events] == [
        EVENT_ENDORSEMENT_CREATED,
        EVENT_ENDORSEMENT_REVOKED,
    ]
    assert events[0].payload["voter_id"] == "voter-1"
    assert all(e.dispatched is False for e in events)


def test_active_for_voter_lists_only_active(ledger, make_candidate) -> None:
    make_candidate("cand-1")
    make_candidate("cand-2")
    ledger.endorse("voter-1", "cand-1")
    ledger.endorse("voter-1", "cand-2")
    ledger.revoke("voter-1", "cand-1")

    active = ledger.active_for_voter("voter-1")

    assert [e.candidate_id for e in active] == ["cand-2"]


def test_transient_failure_is_retried(db_session, make_candidate, reload, mocker) -> None:
    make_candidate("cand-1")
    ledger = EndorsementLedger(db_session, max_retries=2, retry_base_delay=0)
    real_attempt = ledger._endorse_once
    calls = {"n": 0}

    def flaky(voter_id, candidate_id):
        calls["n"] += 1
        if calls["n"] == 1:
            raise StoreUnavailable("database is locked")
        return real_attempt(voter_id, candidate_id)

    mocker.patch.object(ledger, "_endorse_once", side_effect=flaky)

    ledger.endorse("voter-1", "cand-1")

    assert calls["n"] == 2
    assert reload("cand-1").endorsement_count == 1


def test_operational_error_surfaces_as_store_unavailable(
    ledger, db_session, make_candidate, mocker
) -> None:
    make_candidate("cand-1")
    mocker.patch.object(
        db_session,
        "execute",
        side_effect=OperationalError("UPDATE candidate", {}, Exception("database is locked")),
    )

    with pytest.raises(StoreUnavailable):
        ledger.endorse("voter-1", "cand-1")


def test_concurrent_endorsements_are_all_counted(tmp_path) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    with factory() as db:
        db.add(Candidate(id="cand-1", user_id="user-1", display_name="Busy", status="approved"))
        db.commit()

    voters = [f"voter-{n}" for n in range(12)]
    barrier = threading.Barrier(len(voters))
    errors: list[BaseException] = []

    def endorse(voter_id: str) -> None:
        with factory() as db:
            barrier.wait()
            try:
                EndorsementLedger(db, max_retries=5, retry_base_delay=0.01).endorse(
                    voter_id, "cand-1"
                )
            except Exception as exc:  # collected for the assertion below
                errors.append(exc)

    threads = [threading.Thread(target=endorse, args=(v,)) for v in voters]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert errors == []
        with factory() as db:
            assert db.get(Candidate, "cand-1").endorsement_count == len(voters)
            assert _active_count(db, "cand-1") == len(voters)
    finally:
        engine.dispose()


def test_concurrent_endorsements_of_same_pair_succeed_once(tmp_path) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    with factory() as db:
        db.add(Candidate(id="cand-1", user_id="user-1", display_name="Busy", status="approved"))
        db.commit()

    attempts = 8
    barrier = threading.Barrier(attempts)
    outcomes: list[str] = []
    errors: list[BaseException] = []
    lock = threading.Lock()

    def endorse() -> None:
        with factory() as db:
            barrier.wait()
            try:
                EndorsementLedger(db, max_retries=5, retry_base_delay=0.01).endorse(
                    "voter-1", "cand-1"
                )
            except AlreadyEndorsed:
                outcome = "duplicate"
            except Exception as exc:  # collected for the assertion below
                errors.append(exc)
                return
            else:
                outcome = "created"
            with lock:
                outcomes.append(outcome)

    threads = [threading.Thread(target=endorse) for _ in range(attempts)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert errors == []
        assert outcomes.count("created") == 1
        assert outcomes.count("duplicate") == attempts - 1
        with factory() as db:
            assert db.get(Candidate, "cand-1").endorsement_count == 1
            assert _active_count(db, "cand-1") == 1
    finally:
        engine.dispose()
