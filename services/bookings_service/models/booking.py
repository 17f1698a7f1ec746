"""Booking model: one reserved time range on a coach's calendar."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.bookings_service.models.enums import (
    BookingStatus,
    PaymentMethod,
    enum_values,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column


class Booking(Base):
    """A reservation of ``[start_time, end_time)`` with a coach.

    No two non-cancelled bookings for the same coach may overlap. On
    PostgreSQL this is enforced by the ``bookings_no_overlap_per_coach``
    exclusion constraint (see alembic); the booking handler also serializes
    check-and-insert per coach.
    """

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    service_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("service_types.id"), nullable=False
    )
    coach_id: Mapped[str] = mapped_column(String, nullable=False)

    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(
            BookingStatus,
            name="booking_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=BookingStatus.CONFIRMED,
    )

    # === Payment ===
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(
        SAEnum(
            PaymentMethod,
            name="booking_payment_method_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    purchased_package_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("purchased_packages.id"), nullable=True
    )
    amount_paid: Mapped[float] = mapped_column(
        Float, default=0.0, server_default="0", nullable=False
    )
    stripe_payment_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # === Timestamps ===
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_booking_time_order"),
        CheckConstraint("amount_paid >= 0", name="ck_booking_amount_non_negative"),
        Index("ix_bookings_coach_window", "coach_id", "start_time", "end_time"),
    )

    def __repr__(self):
        return f"<Booking {self.id} coach={self.coach_id} {self.start_time}-{self.end_time} ({self.status.value})>"
