# src/civic_align/models/metrics.py
"""Daily profile metrics appended by the external metrics collector."""
from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from civic_align.db.session import Base


class ProfileMetricsDay(Base):
    """Per-candidate, per-day aggregate of views and endorsements received."""

    __tablename__ = "profile_metrics_day"

    candidate_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("candidate.id", ondelete="CASCADE"),
        primary_key=True,
    )
    metric_date: Mapped[date] = mapped_column(Date, primary_key=True)
    profile_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unique_viewers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    endorsements_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
