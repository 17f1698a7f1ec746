"""Member progress through the curriculum."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy import UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship


class MemberProgress(Base):
    """Where a member is in the curriculum.

    ``version`` is bumped on every advance; writers compare-and-swap on it.
    """

    __tablename__ = "member_progress"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    current_phase: Mapped[str] = mapped_column(String, nullable=False)
    current_week: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default="1"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    phases: Mapped[list["PhaseProgress"]] = relationship(
        back_populates="member_progress",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="PhaseProgress.started_at",
    )

    __table_args__ = (
        CheckConstraint("current_week >= 1", name="ck_progress_week_positive"),
    )

    def __repr__(self):
        return f"<MemberProgress {self.user_id} {self.current_phase} w{self.current_week} v{self.version}>"


class PhaseProgress(Base):
    __tablename__ = "phase_progress"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    member_progress_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("member_progress.id", ondelete="CASCADE"),
        nullable=False,
    )
    phase: Mapped[str] = mapped_column(String, nullable=False)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    member_progress: Mapped[MemberProgress] = relationship(back_populates="phases")

    __table_args__ = (
        UniqueConstraint("member_progress_id", "phase", name="uq_phase_progress_member_phase"),
    )
