"""initial schema

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-18 09:12:44.518203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f0a9d2b7e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the candidate, endorsement, preference and contest tables."""
    op.create_table(
        "candidate",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("endorsement_count", sa.Integer(), nullable=False),
        sa.Column("profile_views", sa.Integer(), nullable=False),
        sa.Column("trending_score", sa.Integer(), nullable=True),
        sa.Column("trending_rank", sa.Integer(), nullable=True),
        sa.Column("trending_computed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("endorsement_rank", sa.Integer(), nullable=True),
        sa.Column("eliminated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("elimination_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("endorsement_count >= 0", name="ck_candidate_endorsement_count"),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'denied', 'eliminated')",
            name="ck_candidate_status",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_candidate_user_id", "candidate", ["user_id"])
    op.create_index("ix_candidate_status", "candidate", ["status"])
    op.create_index(
        "ix_candidate_status_endorsements", "candidate", ["status", "endorsement_count"]
    )
    op.create_index("ix_candidate_status_trending", "candidate", ["status", "trending_score"])

    op.create_table(
        "candidate_position",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("candidate_id", sa.String(length=64), nullable=False),
        sa.Column("issue_id", sa.String(length=64), nullable=False),
        sa.Column("position", sa.Text(), nullable=False),
        sa.Column("priority", sa.SmallInteger(), nullable=False),
        sa.Column("spectrum_position", sa.SmallInteger(), nullable=False),
        sa.CheckConstraint(
            "spectrum_position BETWEEN -100 AND 100", name="ck_candidate_position_spectrum"
        ),
        sa.CheckConstraint("priority >= 1", name="ck_candidate_position_priority"),
        sa.ForeignKeyConstraint(["candidate_id"], ["candidate.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("candidate_id", "issue_id", name="uq_candidate_position_issue"),
        sa.UniqueConstraint("candidate_id", "priority", name="uq_candidate_position_priority"),
    )
    op.create_index(
        "ix_candidate_position_candidate_id", "candidate_position", ["candidate_id"]
    )

    op.create_table(
        "endorsement",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("voter_id", sa.String(length=64), nullable=False),
        sa.Column("candidate_id", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["candidate_id"], ["candidate.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_endorsement_active_pair",
        "endorsement",
        ["voter_id", "candidate_id"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )
    op.create_index("ix_endorsement_voter_active", "endorsement", ["voter_id", "is_active"])
    op.create_index("ix_endorsement_candidate", "endorsement", ["candidate_id"])

    op.create_table(
        "voter_preferences",
        sa.Column("voter_id", sa.String(length=64), nullable=False),
        sa.Column("selected_issues", sa.JSON(), nullable=False),
        sa.Column("dealbreakers", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("voter_id"),
    )

    op.create_table(
        "issue",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_issue_category", "issue", ["category"])

    op.create_table(
        "psa",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("candidate_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("issue_ids", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["candidate_id"], ["candidate.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_psa_candidate_status", "psa", ["candidate_id", "status"])

    op.create_table(
        "profile_metrics_day",
        sa.Column("candidate_id", sa.String(length=64), nullable=False),
        sa.Column("metric_date", sa.Date(), nullable=False),
        sa.Column("profile_views", sa.Integer(), nullable=False),
        sa.Column("unique_viewers", sa.Integer(), nullable=False),
        sa.Column("endorsements_received", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["candidate_id"], ["candidate.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("candidate_id", "metric_date"),
    )

    op.create_table(
        "party_config",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("party_name", sa.Text(), nullable=False),
        sa.Column("contest_stage", sa.String(length=32), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "endorsement_cutoff",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("party_config_id", sa.Integer(), nullable=False),
        sa.Column("stage", sa.Integer(), nullable=False),
        sa.Column("threshold", sa.Integer(), nullable=False),
        sa.Column("elimination_date", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["party_config_id"], ["party_config.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("party_config_id", "stage", name="uq_cutoff_stage"),
    )

    op.create_table(
        "domain_event",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("aggregate_id", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("dispatched", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_domain_event_aggregate_id", "domain_event", ["aggregate_id"])
    op.create_index("ix_domain_event_pending", "domain_event", ["dispatched", "id"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_domain_event_pending", table_name="domain_event")
    op.drop_index("ix_domain_event_aggregate_id", table_name="domain_event")
    op.drop_table("domain_event")
    op.drop_table("endorsement_cutoff")
    op.drop_table("party_config")
    op.drop_table("profile_metrics_day")
    op.drop_index("ix_psa_candidate_status", table_name="psa")
    op.drop_table("psa")
    op.drop_index("ix_issue_category", table_name="issue")
    op.drop_table("issue")
    op.drop_table("voter_preferences")
    op.drop_index("ix_endorsement_candidate", table_name="endorsement")
    op.drop_index("ix_endorsement_voter_active", table_name="endorsement")
    op.drop_index("uq_endorsement_active_pair", table_name="endorsement")
    op.drop_table("endorsement")
    op.drop_index("ix_candidate_position_candidate_id", table_name="candidate_position")
    op.drop_table("candidate_position")
    op.drop_index("ix_candidate_status_trending", table_name="candidate")
    op.drop_index("ix_candidate_status_endorsements", table_name="candidate")
    op.drop_index("ix_candidate_status", table_name="candidate")
    op.drop_index("ix_candidate_user_id", table_name="candidate")
    op.drop_table("candidate")
