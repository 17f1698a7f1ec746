"""Prepaid session packages and hybrid credit balances."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import ensure_utc, utc_now
from libs.db.base import Base
from services.bookings_service.models.enums import PackageStatus, enum_values
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship


class SessionPackage(Base):
    """A package definition members can buy (e.g. "5 private lessons")."""

    __tablename__ = "session_packages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    session_count: Mapped[int] = mapped_column(Integer, nullable=False)
    base_price: Mapped[float] = mapped_column(Float, default=0.0)
    member_price: Mapped[float] = mapped_column(Float, default=0.0)
    validity_days: Mapped[int] = mapped_column(Integer, default=90)
    service_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("service_types.id"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    def __repr__(self):
        return f"<SessionPackage {self.name} x{self.session_count}>"


class PurchasedPackage(Base):
    """A member's instance of a package, debited one session per booking.

    ``status`` may lag behind ``expires_at``: a package past its expiry is
    unusable whatever its stored status says.
    """

    __tablename__ = "purchased_packages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    package_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("session_packages.id"), nullable=True
    )
    sessions_total: Mapped[int] = mapped_column(Integer, nullable=False)
    sessions_remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    purchased_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    status: Mapped[PackageStatus] = mapped_column(
        SAEnum(
            PackageStatus,
            name="package_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=PackageStatus.ACTIVE,
    )
    stripe_payment_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    package = relationship("SessionPackage", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "sessions_remaining >= 0", name="ck_package_remaining_non_negative"
        ),
        CheckConstraint(
            "sessions_remaining <= sessions_total",
            name="ck_package_remaining_within_total",
        ),
    )

    def is_expired(self, now: datetime) -> bool:
        return ensure_utc(self.expires_at) < now

    def is_usable(self, now: datetime) -> bool:
        return (
            self.status == PackageStatus.ACTIVE
            and self.sessions_remaining > 0
            and not self.is_expired(now)
        )

    def __repr__(self):
        return f"<PurchasedPackage {self.id} {self.sessions_remaining}/{self.sessions_total} ({self.status.value})>"


class MemberCredits(Base):
    """Hybrid-membership credit allowance for a member."""

    __tablename__ = "member_credits"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    membership_tier: Mapped[str] = mapped_column(String, default="starter")
    hybrid_credits_remaining: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint(
            "hybrid_credits_remaining >= 0", name="ck_hybrid_credits_non_negative"
        ),
    )

    def __repr__(self):
        return f"<MemberCredits {self.user_id} hybrid={self.hybrid_credits_remaining}>"
