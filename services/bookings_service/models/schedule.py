"""Bookable services and coach calendars."""

import uuid
from datetime import datetime, time
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.bookings_service.models.enums import ServiceKind, enum_values
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, Integer, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column


class ServiceType(Base):
    __tablename__ = "service_types"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=60)
    base_price: Mapped[float] = mapped_column(Float, default=0.0)
    member_price: Mapped[float] = mapped_column(Float, default=0.0)
    kind: Mapped[ServiceKind] = mapped_column(
        SAEnum(
            ServiceKind,
            name="service_kind_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ServiceKind.LESSON,
    )
    max_participants: Mapped[int] = mapped_column(Integer, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    def __repr__(self):
        return f"<ServiceType {self.name} ({self.duration_minutes}m)>"


class CoachAvailability(Base):
    """Weekly recurring window in which a coach takes bookings.

    ``day_of_week`` follows the JavaScript convention the booking UI sends:
    0 = Sunday .. 6 = Saturday. Times are wall-clock in ``Settings.TIMEZONE``.
    """

    __tablename__ = "coach_availability"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    coach_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_dow"),
    )


class BlockedTime(Base):
    __tablename__ = "blocked_times"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    coach_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    start_datetime: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_datetime: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    reason: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
