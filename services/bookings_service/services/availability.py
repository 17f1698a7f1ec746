"""Bookable slot generation for a single day.

Weekly availability windows are wall-clock times in ``Settings.TIMEZONE``.
Each window is cut into slots of the service duration, starting every
``SLOT_INTERVAL_MINUTES``. A slot is offered only if it fits entirely inside
the window; it is marked unavailable when it overlaps a blocked time or a
non-cancelled booking, or starts in the past.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from libs.common.config import get_settings
from libs.common.datetime_utils import ensure_utc, utc_now
from libs.common.errors import InvalidRequest
from libs.common.logging import get_logger
from services.bookings_service.models import (
    BlockedTime,
    Booking,
    BookingStatus,
    CoachAvailability,
    ServiceType,
)
from services.bookings_service.schemas import (
    AvailabilityRequest,
    AvailabilityResponse,
    TimeSlot,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

Interval = tuple[datetime, datetime]


def js_day_of_week(target: date) -> int:
    """0 = Sunday .. 6 = Saturday, matching ``CoachAvailability.day_of_week``."""
    return (target.weekday() + 1) % 7


def _overlaps(start: datetime, end: datetime, busy: Iterable[Interval]) -> bool:
    return any(start < busy_end and end > busy_start for busy_start, busy_end in busy)


def build_slots(
    *,
    target_date: date,
    windows: Sequence[tuple[time, time]],
    duration_minutes: int,
    blocked: Sequence[Interval],
    booked: Sequence[Interval],
    now: datetime,
    local_tz: str,
    interval_minutes: int = 30,
) -> list[TimeSlot]:
    """Cut the day's availability windows into slots.

    ``blocked``, ``booked`` and ``now`` are UTC-aware; slot labels are
    ``HH:MM`` in ``local_tz``.
    """
    tz = ZoneInfo(local_tz)
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=interval_minutes)
    slots: list[TimeSlot] = []

    for window_start, window_end in windows:
        cursor = datetime.combine(target_date, window_start, tzinfo=tz)
        limit = datetime.combine(target_date, window_end, tzinfo=tz)
        while cursor + duration <= limit:
            slot_end = cursor + duration
            start_utc, end_utc = ensure_utc(cursor), ensure_utc(slot_end)
            available = not (
                _overlaps(start_utc, end_utc, blocked)
                or _overlaps(start_utc, end_utc, booked)
                or start_utc < now
            )
            slots.append(
                TimeSlot(
                    start_time=cursor.strftime("%H:%M"),
                    end_time=slot_end.strftime("%H:%M"),
                    available=available,
                )
            )
            cursor += step
    return slots


async def get_availability(
    db: AsyncSession,
    request: AvailabilityRequest,
    now: Optional[datetime] = None,
) -> AvailabilityResponse:
    """Slots for ``request.date``, optionally narrowed to one coach."""
    if request.date is None:
        raise InvalidRequest("Date is required")

    settings = get_settings()
    now = now or utc_now()
    tz = ZoneInfo(settings.TIMEZONE)

    duration = settings.DEFAULT_SESSION_MINUTES
    if request.service_type_id:
        service_type = await db.get(ServiceType, request.service_type_id)
        if service_type:
            duration = service_type.duration_minutes

    windows_query = select(CoachAvailability).where(
        CoachAvailability.day_of_week == js_day_of_week(request.date)
    )
    if request.coach_id:
        windows_query = windows_query.where(
            CoachAvailability.coach_id == request.coach_id
        )
    windows_query = windows_query.order_by(CoachAvailability.start_time)
    windows = (await db.execute(windows_query)).scalars().all()

    # Bounds go to the store in UTC like every stored timestamp
    local_start = datetime.combine(request.date, time.min, tzinfo=tz)
    day_start = ensure_utc(local_start)
    day_end = ensure_utc(local_start + timedelta(days=1))

    blocked_query = select(BlockedTime).where(
        BlockedTime.start_datetime < day_end,
        BlockedTime.end_datetime > day_start,
    )
    booked_query = select(Booking).where(
        Booking.status != BookingStatus.CANCELLED,
        Booking.start_time < day_end,
        Booking.end_time > day_start,
    )
    if request.coach_id:
        blocked_query = blocked_query.where(BlockedTime.coach_id == request.coach_id)
        booked_query = booked_query.where(Booking.coach_id == request.coach_id)

    blocked = [
        (ensure_utc(b.start_datetime), ensure_utc(b.end_datetime))
        for b in (await db.execute(blocked_query)).scalars().all()
    ]
    booked = [
        (ensure_utc(b.start_time), ensure_utc(b.end_time))
        for b in (await db.execute(booked_query)).scalars().all()
    ]

    slots = build_slots(
        target_date=request.date,
        windows=[(w.start_time, w.end_time) for w in windows],
        duration_minutes=duration,
        blocked=blocked,
        booked=booked,
        now=now,
        local_tz=settings.TIMEZONE,
        interval_minutes=settings.SLOT_INTERVAL_MINUTES,
    )
    logger.info(
        "Availability for %s coach=%s: %d slots (%d open)",
        request.date,
        request.coach_id,
        len(slots),
        sum(1 for s in slots if s.available),
    )
    return AvailabilityResponse(date=request.date, slots=slots)
