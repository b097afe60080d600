# src/civic_align/models/party.py
"""Party-wide configuration: contest stage and endorsement cutoffs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civic_align.db.session import Base
from civic_align.db.time import utcnow

CONTEST_STAGES = ("pre_nomination", "nomination", "voting", "post_election")


class PartyConfig(Base):
    """Singleton row describing the current state of the nomination contest."""

    __tablename__ = "party_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    party_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    contest_stage: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pre_nomination"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    endorsement_cutoffs: Mapped[list[EndorsementCutoff]] = relationship(
        "EndorsementCutoff",
        cascade="all, delete-orphan",
        order_by="EndorsementCutoff.stage",
    )


class EndorsementCutoff(Base):
    """Threshold below which approved candidates are eliminated at a stage."""

    __tablename__ = "endorsement_cutoff"
    __table_args__ = (UniqueConstraint("party_config_id", "stage", name="uq_cutoff_stage"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    party_config_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("party_config.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Stage 1 is evaluated first.
    stage: Mapped[int] = mapped_column(Integer, nullable=False)
    threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    elimination_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
