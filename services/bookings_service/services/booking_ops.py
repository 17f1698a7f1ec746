"""Core booking operations: conflict check, package/credit debit and insert.

``create_booking`` runs the whole sequence as one unit:

1. Validate the required scheduling fields
2. Take the coach's schedule lock
3. Reject overlapping non-cancelled bookings (half-open ``[start, end)``)
4. Debit the package or hybrid credit with a conditional UPDATE
5. Insert the booking as ``confirmed``
6. Commit; any failure rolls back every step
"""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import ensure_utc, to_utc, utc_now
from libs.common.errors import InvalidRequest, PersistenceFailure, ServiceError
from libs.common.logging import get_logger
from services.bookings_service.errors import (
    BookingNotFound,
    NoCreditsRemaining,
    PackageExpired,
    PackageNotFound,
    SlotUnavailable,
)
from services.bookings_service.models import (
    Booking,
    BookingStatus,
    MemberCredits,
    PackageStatus,
    PaymentMethod,
    PurchasedPackage,
    RequestedPaymentMethod,
    ServiceType,
)
from services.bookings_service.schemas import BookingCreateRequest
from services.bookings_service.services.schedule_lock import coach_schedule_lock
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

HYBRID_CREDIT_NOTE = "[Hybrid Credit]"
OVERLAP_CONSTRAINT = "bookings_no_overlap_per_coach"

_REQUIRED_FIELDS = ("service_type_id", "coach_id", "start_time", "end_time")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_fields(request: BookingCreateRequest) -> None:
    missing = [name for name in _REQUIRED_FIELDS if not getattr(request, name)]
    if missing:
        raise InvalidRequest(
            "Missing required booking fields", details={"missing": missing}
        )


def _is_overlap_violation(exc: IntegrityError) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return OVERLAP_CONSTRAINT in message or "exclusion constraint" in message


async def find_conflicting_booking(
    db: AsyncSession,
    *,
    coach_id: str,
    start_time: datetime,
    end_time: datetime,
) -> Optional[uuid.UUID]:
    """Return the id of a non-cancelled booking overlapping ``[start, end)``."""
    result = await db.execute(
        select(Booking.id)
        .where(
            Booking.coach_id == coach_id,
            Booking.status != BookingStatus.CANCELLED,
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def debit_package(
    db: AsyncSession,
    *,
    user_id: str,
    package_id: uuid.UUID,
    now: datetime,
) -> PurchasedPackage:
    """Take one session from a member's package inside the open transaction.

    A depleted package reports ``NoCreditsRemaining`` and a past ``expires_at``
    reports ``PackageExpired`` whatever the stored status; any other
    non-active package is ``PackageNotFound``.

    The decrement is a conditional UPDATE guarded by ``sessions_remaining > 0``
    so concurrent bookings against the same package cannot overdraw it.
    """
    result = await db.execute(
        select(PurchasedPackage).where(
            PurchasedPackage.id == package_id,
            PurchasedPackage.user_id == user_id,
        )
    )
    package = result.scalar_one_or_none()
    if not package:
        raise PackageNotFound()
    if package.sessions_remaining <= 0 or package.status == PackageStatus.DEPLETED:
        raise NoCreditsRemaining()
    if package.is_expired(now):
        raise PackageExpired()
    if package.status != PackageStatus.ACTIVE:
        raise PackageNotFound()

    decremented = await db.execute(
        update(PurchasedPackage)
        .where(
            PurchasedPackage.id == package_id,
            PurchasedPackage.status == PackageStatus.ACTIVE,
            PurchasedPackage.sessions_remaining > 0,
        )
        .values(sessions_remaining=PurchasedPackage.sessions_remaining - 1)
        .execution_options(synchronize_session=False)
    )
    if decremented.rowcount != 1:
        # Another booking took the last session between our read and write
        raise NoCreditsRemaining()

    await db.execute(
        update(PurchasedPackage)
        .where(
            PurchasedPackage.id == package_id,
            PurchasedPackage.sessions_remaining == 0,
        )
        .values(status=PackageStatus.DEPLETED)
        .execution_options(synchronize_session=False)
    )
    await db.refresh(package)

    logger.info(
        "Package credit deducted package=%s remaining=%d status=%s",
        package_id,
        package.sessions_remaining,
        package.status.value,
    )
    return package


async def debit_hybrid_credit(db: AsyncSession, *, user_id: str) -> None:
    """Take one hybrid credit from the member's allowance."""
    decremented = await db.execute(
        update(MemberCredits)
        .where(
            MemberCredits.user_id == user_id,
            MemberCredits.hybrid_credits_remaining > 0,
        )
        .values(
            hybrid_credits_remaining=MemberCredits.hybrid_credits_remaining - 1
        )
        .execution_options(synchronize_session=False)
    )
    if decremented.rowcount != 1:
        raise NoCreditsRemaining(
            "No hybrid credits available. Please use a package or pay directly."
        )
    logger.info("Hybrid credit deducted for user %s", user_id)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_booking(
    db: AsyncSession,
    *,
    user_id: str,
    request: BookingCreateRequest,
    now: Optional[datetime] = None,
) -> Booking:
    """Create a confirmed booking for ``user_id``.

    Raises:
        InvalidRequest: required field missing, bad time range, unknown
            service type.
        SlotUnavailable: the coach already has an overlapping booking.
        PackageNotFound / NoCreditsRemaining / PackageExpired: the chosen
            package or credit allowance cannot pay for the session.
        PersistenceFailure: the store rejected the write.
    """
    settings = get_settings()
    now = now or utc_now()

    _require_fields(request)
    start_time = to_utc(request.start_time, settings.TIMEZONE)
    end_time = to_utc(request.end_time, settings.TIMEZONE)
    if end_time <= start_time:
        raise InvalidRequest("end_time must be after start_time")

    service_type = await db.get(ServiceType, request.service_type_id)
    if not service_type:
        raise InvalidRequest("Unknown service type")

    requested_method = request.payment_method
    logger.info(
        "Booking request received user=%s coach=%s method=%s service=%s",
        user_id,
        request.coach_id,
        requested_method.value if requested_method else None,
        request.service_type_id,
    )

    try:
        async with coach_schedule_lock(db, request.coach_id):
            conflict_id = await find_conflicting_booking(
                db,
                coach_id=request.coach_id,
                start_time=start_time,
                end_time=end_time,
            )
            if conflict_id:
                logger.info(
                    "Slot conflict coach=%s with booking=%s",
                    request.coach_id,
                    conflict_id,
                )
                raise SlotUnavailable()

            notes = request.notes
            stored_method: Optional[PaymentMethod] = None
            if requested_method == RequestedPaymentMethod.HYBRID_CREDIT:
                await debit_hybrid_credit(db, user_id=user_id)
                stored_method = PaymentMethod.CREDITS
                notes = f"{notes} {HYBRID_CREDIT_NOTE}" if notes else HYBRID_CREDIT_NOTE
            elif requested_method is not None:
                stored_method = PaymentMethod(requested_method.value)

            if (
                requested_method == RequestedPaymentMethod.PACKAGE
                and request.purchased_package_id
            ):
                await debit_package(
                    db,
                    user_id=user_id,
                    package_id=request.purchased_package_id,
                    now=now,
                )

            booking = Booking(
                user_id=user_id,
                service_type_id=request.service_type_id,
                coach_id=request.coach_id,
                start_time=start_time,
                end_time=end_time,
                status=BookingStatus.CONFIRMED,
                payment_method=stored_method,
                purchased_package_id=request.purchased_package_id,
                amount_paid=request.amount_paid or 0,
                stripe_payment_id=request.stripe_payment_id,
                notes=notes,
            )
            db.add(booking)
            await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except IntegrityError as exc:
        await db.rollback()
        if _is_overlap_violation(exc):
            logger.info("Overlap constraint rejected booking for coach %s", request.coach_id)
            raise SlotUnavailable() from exc
        logger.exception("Integrity error while creating booking")
        raise PersistenceFailure() from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Database error while creating booking")
        raise PersistenceFailure() from exc

    await db.refresh(booking)
    logger.info(
        "Booking created booking=%s method=%s", booking.id, booking.payment_method
    )
    return booking


# ---------------------------------------------------------------------------
# Cancel / read
# ---------------------------------------------------------------------------


async def cancel_booking(
    db: AsyncSession,
    *,
    user_id: Optional[str],
    booking_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> Booking:
    """Cancel a booking. Cancelling twice is a no-op.

    With a ``user_id`` only that member's bookings are found; ``None`` is
    the admin path and matches any owner. Package sessions are not returned
    here.
    """
    stmt = select(Booking).where(Booking.id == booking_id)
    if user_id is not None:
        stmt = stmt.where(Booking.user_id == user_id)
    result = await db.execute(stmt.with_for_update())
    booking = result.scalar_one_or_none()
    if not booking:
        raise BookingNotFound()

    if booking.status == BookingStatus.CANCELLED:
        return booking
    if booking.status in (BookingStatus.COMPLETED, BookingStatus.NO_SHOW):
        raise InvalidRequest(
            f"A {booking.status.value} booking can no longer be cancelled"
        )

    booking.status = BookingStatus.CANCELLED
    booking.cancelled_at = now or utc_now()
    await db.commit()
    await db.refresh(booking)

    logger.info("Booking %s cancelled by %s", booking.id, user_id or "admin")
    return booking


async def list_bookings(
    db: AsyncSession, *, user_id: str, now: Optional[datetime] = None
) -> tuple[list[Booking], list[Booking]]:
    """Return ``(upcoming, past)`` for the member, ordered by start time.

    Cancelled bookings are always in ``past``.
    """
    now = now or utc_now()
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.start_time.asc())
    )
    upcoming, past = [], []
    for booking in result.scalars().all():
        if (
            ensure_utc(booking.start_time) > now
            and booking.status != BookingStatus.CANCELLED
        ):
            upcoming.append(booking)
        else:
            past.append(booking)
    return upcoming, past


async def list_usable_packages(
    db: AsyncSession, *, user_id: str, now: Optional[datetime] = None
) -> list[PurchasedPackage]:
    """Active, unexpired packages with sessions left, soonest expiry first."""
    now = now or utc_now()
    result = await db.execute(
        select(PurchasedPackage)
        .where(
            PurchasedPackage.user_id == user_id,
            PurchasedPackage.status == PackageStatus.ACTIVE,
        )
        .order_by(PurchasedPackage.expires_at.asc())
    )
    return [pkg for pkg in result.scalars().all() if pkg.is_usable(now)]
