"""create_bookings_tables

Revision ID: b7c1e2d3a401
Revises:
Create Date: 2026-09-28 10:12:00.000000
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "b7c1e2d3a401"
down_revision = None
branch_labels = None
depends_on = None


def _uuid_pk():
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _created_at():
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=True,
    )


def upgrade() -> None:
    op.create_table(
        "service_types",
        _uuid_pk(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("base_price", sa.Float(), nullable=True),
        sa.Column("member_price", sa.Float(), nullable=True),
        sa.Column(
            "kind",
            sa.Enum("lesson", "class", "camp", "assessment", name="service_kind_enum"),
            nullable=True,
        ),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "session_packages",
        _uuid_pk(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("session_count", sa.Integer(), nullable=False),
        sa.Column("base_price", sa.Float(), nullable=True),
        sa.Column("member_price", sa.Float(), nullable=True),
        sa.Column("validity_days", sa.Integer(), nullable=True),
        sa.Column(
            "service_type_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("service_types.id"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "purchased_packages",
        _uuid_pk(),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column(
            "package_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("session_packages.id"),
            nullable=True,
        ),
        sa.Column("sessions_total", sa.Integer(), nullable=False),
        sa.Column("sessions_remaining", sa.Integer(), nullable=False),
        sa.Column("purchased_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "expired", "depleted", name="package_status_enum"),
            nullable=False,
        ),
        sa.Column("stripe_payment_id", sa.String(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "sessions_remaining >= 0", name="ck_package_remaining_non_negative"
        ),
        sa.CheckConstraint(
            "sessions_remaining <= sessions_total",
            name="ck_package_remaining_within_total",
        ),
    )
    op.create_index(
        "ix_purchased_packages_user_id", "purchased_packages", ["user_id"]
    )

    op.create_table(
        "member_credits",
        _uuid_pk(),
        sa.Column("user_id", sa.String(), nullable=False, unique=True),
        sa.Column("membership_tier", sa.String(), nullable=True),
        sa.Column("hybrid_credits_remaining", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "hybrid_credits_remaining >= 0", name="ck_hybrid_credits_non_negative"
        ),
    )

    op.create_table(
        "coach_availability",
        _uuid_pk(),
        sa.Column("coach_id", sa.String(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        _created_at(),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_dow"),
    )
    op.create_index(
        "ix_coach_availability_coach_id", "coach_availability", ["coach_id"]
    )

    op.create_table(
        "blocked_times",
        _uuid_pk(),
        sa.Column("coach_id", sa.String(), nullable=False),
        sa.Column("start_datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_blocked_times_coach_id", "blocked_times", ["coach_id"])

    op.create_table(
        "bookings",
        _uuid_pk(),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column(
            "service_type_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("service_types.id"),
            nullable=False,
        ),
        sa.Column("coach_id", sa.String(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "confirmed",
                "completed",
                "cancelled",
                "no_show",
                name="booking_status_enum",
            ),
            nullable=False,
        ),
        sa.Column(
            "payment_method",
            sa.Enum(
                "credits", "package", "direct_pay", name="booking_payment_method_enum"
            ),
            nullable=True,
        ),
        sa.Column(
            "purchased_package_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("purchased_packages.id"),
            nullable=True,
        ),
        sa.Column("amount_paid", sa.Float(), server_default="0", nullable=False),
        sa.Column("stripe_payment_id", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("end_time > start_time", name="ck_booking_time_order"),
        sa.CheckConstraint("amount_paid >= 0", name="ck_booking_amount_non_negative"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index(
        "ix_bookings_coach_window", "bookings", ["coach_id", "start_time", "end_time"]
    )

    # Store-level guarantee that a coach's live bookings never overlap.
    # '[)' matches the half-open intervals used by the booking handler.
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT bookings_no_overlap_per_coach
        EXCLUDE USING gist (
            coach_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (status <> 'cancelled')
        """
    )


def downgrade() -> None:
    op.execute(
        "ALTER TABLE bookings DROP CONSTRAINT IF EXISTS bookings_no_overlap_per_coach"
    )
    op.drop_index("ix_bookings_coach_window", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_blocked_times_coach_id", table_name="blocked_times")
    op.drop_table("blocked_times")
    op.drop_index("ix_coach_availability_coach_id", table_name="coach_availability")
    op.drop_table("coach_availability")
    op.drop_table("member_credits")
    op.drop_index("ix_purchased_packages_user_id", table_name="purchased_packages")
    op.drop_table("purchased_packages")
    op.drop_table("session_packages")
    op.drop_table("service_types")

    for enum_name in (
        "booking_payment_method_enum",
        "booking_status_enum",
        "package_status_enum",
        "service_kind_enum",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
