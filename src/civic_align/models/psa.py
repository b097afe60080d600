# src/civic_align/models/psa.py
"""SQLAlchemy model for candidate public service announcements."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from civic_align.db.session import Base
from civic_align.db.time import utcnow

PSA_STATUS_DRAFT = "draft"
PSA_STATUS_PUBLISHED = "published"


class PSA(Base):
    """Short video a candidate publishes about the issues they run on."""

    __tablename__ = "psa"
    __table_args__ = (Index("ix_psa_candidate_status", "candidate_id", "status"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    candidate_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("candidate.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=PSA_STATUS_DRAFT)
    issue_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
