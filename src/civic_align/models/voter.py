# src/civic_align/models/voter.py
"""SQLAlchemy models for voter issue preferences."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from civic_align.db.session import Base
from civic_align.db.time import utcnow


class VoterPreferences(Base):
    """Issues a voter cares about and the ones they will not compromise on.

    Only the voter mutates this row; batch jobs never touch it.
    """

    __tablename__ = "voter_preferences"

    voter_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    selected_issues: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    dealbreakers: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
