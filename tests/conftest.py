# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import date
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EVENT_RELAY_ENABLED", "false")

from civic_align.db.session import Base, get_db, get_session_factory
from civic_align.main import app as fastapi_app
from civic_align.models import (
    PSA,
    Candidate,
    CandidatePosition,
    ProfileMetricsDay,
    VoterPreferences,
)
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED
from civic_align.models.psa import PSA_STATUS_PUBLISHED

TEST_DB_URL = "sqlite://"

_CANDIDATE_COUNTER = count(1)
_VOTER_COUNTER = count(1)

DEFAULT_ISSUES = ["healthcare", "climate", "economy", "education"]

PositionSpec = tuple[str, int, int]


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(
    app: FastAPI,
    session_factory: sessionmaker[Session],
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_session_override
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_session_factory, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def create_candidate(
    db: Session,
    candidate_id: str | None = None,
    *,
    status: str = CANDIDATE_STATUS_APPROVED,
    endorsement_count: int = 0,
    positions: list[PositionSpec] | None = None,
    display_name: str | None = None,
) -> Candidate:
    """Persist a candidate with ``(issue_id, priority, spectrum)`` positions."""
    number = next(_CANDIDATE_COUNTER)
    candidate = Candidate(
        id=candidate_id or f"cand-{number:04d}",
        user_id=f"user-{number:04d}",
        display_name=display_name or f"Candidate {number}",
        status=status,
        endorsement_count=endorsement_count,
    )
    candidate.positions = [
        CandidatePosition(issue_id=issue, priority=priority, spectrum_position=spectrum)
        for issue, priority, spectrum in positions or []
    ]
    db.add(candidate)
    db.commit()
    db.refresh(candidate)
    return candidate


def create_voter(
    db: Session,
    voter_id: str | None = None,
    *,
    selected_issues: list[str] | None = None,
    dealbreakers: list[str] | None = None,
) -> VoterPreferences:
    """Persist voter preferences directly, bypassing cardinality checks."""
    prefs = VoterPreferences(
        voter_id=voter_id or f"voter-{next(_VOTER_COUNTER):04d}",
        selected_issues=list(DEFAULT_ISSUES if selected_issues is None else selected_issues),
        dealbreakers=list(dealbreakers or []),
    )
    db.add(prefs)
    db.commit()
    db.refresh(prefs)
    return prefs


def add_metrics(
    db: Session,
    candidate_id: str,
    metric_date: date,
    *,
    views: int = 0,
    endorsements: int = 0,
) -> None:
    db.add(
        ProfileMetricsDay(
            candidate_id=candidate_id,
            metric_date=metric_date,
            profile_views=views,
            unique_viewers=views,
            endorsements_received=endorsements,
        )
    )
    db.commit()


def add_psa(
    db: Session,
    candidate_id: str,
    issue_ids: list[str],
    *,
    status: str = PSA_STATUS_PUBLISHED,
) -> PSA:
    psa = PSA(
        id=f"psa-{candidate_id}-{len(issue_ids)}-{status}",
        candidate_id=candidate_id,
        title="Announcement",
        status=status,
        issue_ids=issue_ids,
    )
    db.add(psa)
    db.commit()
    return psa


@pytest.fixture()
def make_candidate(db_session: Session) -> Callable[..., Candidate]:
    def _make(candidate_id: str | None = None, **kwargs: Any) -> Candidate:
        return create_candidate(db_session, candidate_id, **kwargs)

    return _make


@pytest.fixture()
def make_voter(db_session: Session) -> Callable[..., VoterPreferences]:
    def _make(voter_id: str | None = None, **kwargs: Any) -> VoterPreferences:
        return create_voter(db_session, voter_id, **kwargs)

    return _make


def reload_candidate(db: Session, candidate_id: str) -> Candidate | None:
    """Return a candidate as currently stored, bypassing the identity map."""
    db.expire_all()
    return db.get(Candidate, candidate_id)


@pytest.fixture()
def record_metrics(db_session: Session) -> Callable[..., None]:
    def _record(candidate_id: str, metric_date: date, **kwargs: int) -> None:
        add_metrics(db_session, candidate_id, metric_date, **kwargs)

    return _record


@pytest.fixture()
def publish_psa(db_session: Session) -> Callable[..., PSA]:
    def _publish(candidate_id: str, issue_ids: list[str], **kwargs: Any) -> PSA:
        return add_psa(db_session, candidate_id, issue_ids, **kwargs)

    return _publish


@pytest.fixture()
def reload(db_session: Session) -> Callable[[str], Candidate | None]:
    def _reload(candidate_id: str) -> Candidate | None:
        return reload_candidate(db_session, candidate_id)

    return _reload
