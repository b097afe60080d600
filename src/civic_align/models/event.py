# src/civic_align/models/event.py
"""Outbox of domain events consumed by external subscribers."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from civic_align.db.session import Base
from civic_align.db.time import utcnow

EVENT_ENDORSEMENT_CREATED = "endorsement.created"
EVENT_ENDORSEMENT_REVOKED = "endorsement.revoked"
EVENT_CANDIDATE_STATUS_CHANGED = "candidate.status_changed"
EVENT_CONTEST_STAGE_CHANGED = "contest.stage_changed"


class DomainEvent(Base):
    """Event appended in the same transaction as the state change it describes.

    The notification service and live listeners read this table through the
    outbox relay; nothing in the core calls them directly.
    """

    __tablename__ = "domain_event"
    __table_args__ = (Index("ix_domain_event_pending", "dispatched", "id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    # Candidate id, voter id or "contest" depending on the event.
    aggregate_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    dispatched: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
