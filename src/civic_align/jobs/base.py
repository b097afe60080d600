"""Shared plumbing for scheduler-invoked batch jobs."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from civic_align.core.errors import CandidatePoolUnavailable
from civic_align.db.session import SessionLocal

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class JobReport:
    """Outcome of one job run.

    A run that finished scanning the pool is successful even if some
    candidates ended up in ``failed_ids``.
    """

    job: str
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    failed_ids: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)


class BatchJob:
    """Base class giving jobs a session factory and per-candidate checkpoints."""

    name = "batch"

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or SessionLocal

    def read_pool(self, reader: Callable[[Session], T]) -> T:
        """Run a pool query; failure here fails the whole job.

        Raises:
            CandidatePoolUnavailable: If the pool cannot be read.
        """
        try:
            with self.session_factory() as db:
                return reader(db)
        except SQLAlchemyError as exc:
            logger.error("%s job could not read the candidate pool: %s", self.name, exc)
            raise CandidatePoolUnavailable(str(exc)) from exc

    def checkpoint(
        self,
        report: JobReport,
        candidate_id: str,
        write: Callable[[Session], bool],
    ) -> None:
        """Apply one candidate's write in its own transaction.

        ``write`` returns True when it changed the row. Failures are logged
        and recorded so the remaining pool is still processed.
        """
        report.processed += 1
        try:
            with self.session_factory() as db:
                changed = write(db)
                db.commit()
        except SQLAlchemyError as exc:
            logger.warning(
                "%s job failed for candidate %s: %s", self.name, candidate_id, exc, exc_info=True
            )
            report.failed_ids.append(candidate_id)
            return
        if changed:
            report.updated += 1
        else:
            report.skipped += 1
