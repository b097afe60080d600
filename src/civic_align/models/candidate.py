# src/civic_align/models/candidate.py
"""SQLAlchemy models for candidates and their stated issue positions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civic_align.db.session import Base
from civic_align.db.time import utcnow

CANDIDATE_STATUS_PENDING = "pending"
CANDIDATE_STATUS_APPROVED = "approved"
CANDIDATE_STATUS_DENIED = "denied"
CANDIDATE_STATUS_ELIMINATED = "eliminated"

CANDIDATE_STATUSES = (
    CANDIDATE_STATUS_PENDING,
    CANDIDATE_STATUS_APPROVED,
    CANDIDATE_STATUS_DENIED,
    CANDIDATE_STATUS_ELIMINATED,
)


class Candidate(Base):
    """A person running for nomination.

    ``endorsement_count`` is authoritative and only moves through the
    endorsement ledger. Trending and rank columns are derived by the batch
    jobs and may lag behind between runs.
    """

    __tablename__ = "candidate"
    __table_args__ = (
        CheckConstraint("endorsement_count >= 0", name="ck_candidate_endorsement_count"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'denied', 'eliminated')",
            name="ck_candidate_status",
        ),
        Index("ix_candidate_status_endorsements", "status", "endorsement_count"),
        Index("ix_candidate_status_trending", "status", "trending_score"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=CANDIDATE_STATUS_PENDING,
        index=True,
    )

    endorsement_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    profile_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Derived by the ranking jobs; null until the first run touches the row.
    trending_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trending_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trending_computed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    endorsement_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)

    eliminated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    elimination_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    positions: Mapped[list[CandidatePosition]] = relationship(
        "CandidatePosition",
        back_populates="candidate",
        cascade="all, delete-orphan",
        order_by="CandidatePosition.priority",
    )

    @property
    def average_spectrum(self) -> float:
        """Mean spectrum position across stated issues, 0 when none are stated."""
        if not self.positions:
            return 0.0
        return sum(p.spectrum_position for p in self.positions) / len(self.positions)


class CandidatePosition(Base):
    """A candidate's stance on one issue."""

    __tablename__ = "candidate_position"
    __table_args__ = (
        UniqueConstraint("candidate_id", "issue_id", name="uq_candidate_position_issue"),
        UniqueConstraint("candidate_id", "priority", name="uq_candidate_position_priority"),
        CheckConstraint(
            "spectrum_position BETWEEN -100 AND 100",
            name="ck_candidate_position_spectrum",
        ),
        CheckConstraint("priority >= 1", name="ck_candidate_position_priority"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("candidate.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    issue_id: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # 1 = most important for this candidate.
    priority: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    # -100 = most progressive, +100 = most conservative.
    spectrum_position: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)

    candidate: Mapped[Candidate] = relationship("Candidate", back_populates="positions")
