# src/civic_align/models/endorsement.py
"""Models capturing voter endorsements of candidates."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from civic_align.db.session import Base
from civic_align.db.time import utcnow


class Endorsement(Base):
    """Voter support signal for a candidate.

    Revocation flips ``is_active``; rows are never deleted so the history
    of a pair survives repeated endorse/revoke cycles.
    """

    __tablename__ = "endorsement"
    __table_args__ = (
        # At most one active endorsement per pair; inactive history is unconstrained.
        Index(
            "uq_endorsement_active_pair",
            "voter_id",
            "candidate_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index("ix_endorsement_voter_active", "voter_id", "is_active"),
        Index("ix_endorsement_candidate", "candidate_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    voter_id: Mapped[str] = mapped_column(String(64), nullable=False)
    candidate_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("candidate.id"),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
