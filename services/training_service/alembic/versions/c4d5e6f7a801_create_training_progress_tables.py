"""create_training_progress_tables

Revision ID: c4d5e6f7a801
Revises:
Create Date: 2026-09-28 10:40:00.000000
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "c4d5e6f7a801"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "member_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False, unique=True),
        sa.Column("current_phase", sa.String(), nullable=False),
        sa.Column("current_week", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("current_week >= 1", name="ck_progress_week_positive"),
    )

    op.create_table(
        "phase_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "member_progress_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("member_progress.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("phase", sa.String(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "member_progress_id", "phase", name="uq_phase_progress_member_phase"
        ),
    )

    op.create_table(
        "drill_completions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("drill_id", sa.String(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("user_id", "drill_id", name="uq_drill_completion_user_drill"),
    )
    op.create_index(
        "ix_drill_completions_user_id", "drill_completions", ["user_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_drill_completions_user_id", table_name="drill_completions")
    op.drop_table("drill_completions")
    op.drop_table("phase_progress")
    op.drop_table("member_progress")
