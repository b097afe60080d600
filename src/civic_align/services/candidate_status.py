# src/civic_align/services/candidate_status.py
"""Candidate status state machine.

``pending -> approved | denied`` happens through admin review and
``approved -> eliminated`` only through the cutoff job. Everything else is
rejected, including moving an eliminated candidate back.
"""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from civic_align.core.errors import CandidateNotFound, IllegalStatusTransition
from civic_align.db.time import utcnow
from civic_align.models import Candidate
from civic_align.models.candidate import (
    CANDIDATE_STATUS_APPROVED,
    CANDIDATE_STATUS_DENIED,
    CANDIDATE_STATUS_ELIMINATED,
    CANDIDATE_STATUS_PENDING,
)
from civic_align.models.event import EVENT_CANDIDATE_STATUS_CHANGED
from civic_align.services.events import record_event

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    CANDIDATE_STATUS_PENDING: frozenset({CANDIDATE_STATUS_APPROVED, CANDIDATE_STATUS_DENIED}),
    CANDIDATE_STATUS_APPROVED: frozenset({CANDIDATE_STATUS_ELIMINATED}),
    CANDIDATE_STATUS_DENIED: frozenset(),
    CANDIDATE_STATUS_ELIMINATED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """Return True if ``current -> target`` is a legal status change."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def change_status(
    db: Session,
    candidate_id: str,
    target: str,
    *,
    reason: str | None = None,
) -> Candidate:
    """Move a candidate to ``target`` and record a status event.

    The write is conditional on the status the candidate had when read, so
    two concurrent reviewers cannot both apply a transition.

    Raises:
        CandidateNotFound: If the candidate does not exist.
        IllegalStatusTransition: If the change is not allowed from the current status.
    """
    candidate = db.get(Candidate, candidate_id)
    if candidate is None:
        raise CandidateNotFound(candidate_id)
    current = candidate.status
    if not can_transition(current, target):
        raise IllegalStatusTransition(candidate_id, current, target)

    values: dict[str, object] = {"status": target}
    if target == CANDIDATE_STATUS_ELIMINATED:
        values["eliminated_at"] = utcnow()
        values["elimination_reason"] = reason

    result = db.execute(
        update(Candidate)
        .where(Candidate.id == candidate_id, Candidate.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        refreshed = db.get(Candidate, candidate_id)
        raise IllegalStatusTransition(
            candidate_id, refreshed.status if refreshed else current, target
        )

    record_event(
        db,
        EVENT_CANDIDATE_STATUS_CHANGED,
        candidate_id,
        {"from": current, "to": target, "reason": reason},
    )
    db.commit()
    db.refresh(candidate)
    logger.info("Candidate %s moved from %s to %s", candidate_id, current, target)
    return candidate


def approve(db: Session, candidate_id: str) -> Candidate:
    return change_status(db, candidate_id, CANDIDATE_STATUS_APPROVED)


def deny(db: Session, candidate_id: str, reason: str | None = None) -> Candidate:
    return change_status(db, candidate_id, CANDIDATE_STATUS_DENIED, reason=reason)
