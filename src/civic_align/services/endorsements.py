# src/civic_align/services/endorsements.py
"""Endorsement ledger: active endorsements and live candidate counters.

Every mutation runs in one transaction that touches both the endorsement
record and the candidate's counter, so the two never disagree. Counter
changes are single ``UPDATE ... SET endorsement_count = endorsement_count
± 1`` statements executed by the database. Duplicate active endorsements
are rejected by the ``uq_endorsement_active_pair`` partial unique index
rather than a read-then-write check.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy import exists, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from civic_align.core.errors import (
    AlreadyEndorsed,
    CandidateNotEndorsable,
    CandidateNotFound,
    CounterUnderflow,
    StoreUnavailable,
)
from civic_align.core.settings import settings
from civic_align.db.time import utcnow
from civic_align.models import Candidate, Endorsement
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED
from civic_align.models.event import EVENT_ENDORSEMENT_CREATED, EVENT_ENDORSEMENT_REVOKED
from civic_align.services.events import record_event
from civic_align.services.retry import call_with_retry, is_transient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EndorsementLedger:
    """Maintains voter endorsements and each candidate's endorsement count."""

    def __init__(
        self,
        db: Session,
        *,
        max_retries: int | None = None,
        retry_base_delay: float | None = None,
    ) -> None:
        self.db = db
        self.max_retries = settings.ledger_max_retries if max_retries is None else max_retries
        self.retry_base_delay = (
            settings.ledger_retry_base_delay if retry_base_delay is None else retry_base_delay
        )

    def endorse(self, voter_id: str, candidate_id: str) -> Endorsement:
        """Create an active endorsement and increment the candidate's count.

        Raises:
            AlreadyEndorsed: If the pair already has an active endorsement.
            CandidateNotFound: If the candidate does not exist.
            CandidateNotEndorsable: If the candidate is not approved.
            StoreUnavailable: If the store kept failing after retries.
        """
        return self._with_retry(lambda: self._endorse_once(voter_id, candidate_id))

    def revoke(self, voter_id: str, candidate_id: str) -> bool:
        """Deactivate the pair's active endorsement and decrement the count.

        Returns:
            True if an endorsement was revoked, False if none was active.

        Raises:
            CounterUnderflow: If the decrement would take the counter below zero.
            StoreUnavailable: If the store kept failing after retries.
        """
        return self._with_retry(lambda: self._revoke_once(voter_id, candidate_id))

    def has_active(self, voter_id: str, candidate_id: str) -> bool:
        """Return True if the voter currently endorses the candidate."""
        stmt = select(
            exists().where(
                Endorsement.voter_id == voter_id,
                Endorsement.is_active.is_(True),
                Endorsement.candidate_id == candidate_id,
            )
        )
        return bool(self.db.execute(stmt).scalar())

    def active_for_voter(self, voter_id: str) -> list[Endorsement]:
        """Return the voter's active endorsements, newest first."""
        result = self.db.execute(
            select(Endorsement)
            .where(Endorsement.voter_id == voter_id, Endorsement.is_active.is_(True))
            .order_by(Endorsement.created_at.desc(), Endorsement.id.desc())
        )
        return list(result.scalars())

    def _with_retry(self, attempt: Callable[[], T]) -> T:
        return call_with_retry(
            attempt,
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
        )

    def _endorse_once(self, voter_id: str, candidate_id: str) -> Endorsement:
        db = self.db
        try:
            bumped = db.execute(
                update(Candidate)
                .where(
                    Candidate.id == candidate_id,
                    Candidate.status == CANDIDATE_STATUS_APPROVED,
                )
                .values(endorsement_count=Candidate.endorsement_count + 1)
                .execution_options(synchronize_session=False)
            )
            if bumped.rowcount != 1:
                db.rollback()
                candidate = db.get(Candidate, candidate_id)
                if candidate is None:
                    raise CandidateNotFound(candidate_id)
                raise CandidateNotEndorsable(candidate_id, candidate.status)

            endorsement = Endorsement(
                voter_id=voter_id,
                candidate_id=candidate_id,
                is_active=True,
            )
            db.add(endorsement)
            db.flush()
            record_event(
                db,
                EVENT_ENDORSEMENT_CREATED,
                candidate_id,
                {"voter_id": voter_id, "endorsement_id": endorsement.id},
            )
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise AlreadyEndorsed(voter_id, candidate_id) from exc
        except DBAPIError as exc:
            db.rollback()
            if is_transient(exc):
                raise StoreUnavailable(str(exc)) from exc
            raise

        db.expire_all()
        db.refresh(endorsement)
        logger.info("Voter %s endorsed candidate %s", voter_id, candidate_id)
        return endorsement

    def _revoke_once(self, voter_id: str, candidate_id: str) -> bool:
        db = self.db
        try:
            deactivated = db.execute(
                update(Endorsement)
                .where(
                    Endorsement.voter_id == voter_id,
                    Endorsement.candidate_id == candidate_id,
                    Endorsement.is_active.is_(True),
                )
                .values(is_active=False, revoked_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if deactivated.rowcount == 0:
                db.rollback()
                return False

            decremented = db.execute(
                update(Candidate)
                .where(
                    Candidate.id == candidate_id,
                    Candidate.endorsement_count > 0,
                )
                .values(endorsement_count=Candidate.endorsement_count - 1)
                .execution_options(synchronize_session=False)
            )
            if decremented.rowcount != 1:
                db.rollback()
                logger.error(
                    "Refusing revoke of %s -> %s: endorsement counter would underflow",
                    voter_id,
                    candidate_id,
                )
                raise CounterUnderflow(candidate_id)

            record_event(db, EVENT_ENDORSEMENT_REVOKED, candidate_id, {"voter_id": voter_id})
            db.commit()
        except DBAPIError as exc:
            db.rollback()
            if is_transient(exc):
                raise StoreUnavailable(str(exc)) from exc
            raise

        # Instances loaded before the bulk updates would otherwise keep stale values.
        db.expire_all()
        logger.info("Voter %s revoked endorsement of candidate %s", voter_id, candidate_id)
        return True
