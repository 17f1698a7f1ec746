"""Member-facing booking endpoints."""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.bookings_service.integrations import notify_booking_created
from services.bookings_service.models import ServiceType
from services.bookings_service.schemas import (
    AvailabilityRequest,
    AvailabilityResponse,
    BookingCreateRequest,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    PurchasedPackageResponse,
    ServiceTypeResponse,
)
from services.bookings_service.services.availability import get_availability
from services.bookings_service.services.booking_ops import (
    cancel_booking,
    create_booking,
    list_bookings,
    list_usable_packages,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


@router.post("", response_model=BookingEnvelope)
async def create_my_booking(
    body: BookingCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Book a session with a coach, paying by package, credit or direct pay."""
    booking = await create_booking(db, user_id=current_user.user_id, request=body)

    service_type = await db.get(ServiceType, booking.service_type_id)
    background_tasks.add_task(
        notify_booking_created,
        booking,
        current_user,
        service_type.name if service_type else "Training Session",
    )
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.get("/me", response_model=BookingListResponse)
async def list_my_bookings(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Current user's bookings split into upcoming and past."""
    upcoming, past = await list_bookings(db, user_id=current_user.user_id)
    return BookingListResponse(
        upcoming=[BookingResponse.model_validate(b) for b in upcoming],
        past=[BookingResponse.model_validate(b) for b in past],
    )


@router.post("/{booking_id}/cancel", response_model=BookingEnvelope)
async def cancel_my_booking(
    booking_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel one of the current user's bookings."""
    booking = await cancel_booking(
        db, user_id=current_user.user_id, booking_id=booking_id
    )
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


# ---------------------------------------------------------------------------
# Packages / catalogue
# ---------------------------------------------------------------------------


@router.get("/packages/me", response_model=list[PurchasedPackageResponse])
async def list_my_packages(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Packages the current user can still book with."""
    return await list_usable_packages(db, user_id=current_user.user_id)


@router.get("/service-types", response_model=list[ServiceTypeResponse])
async def list_service_types(db: AsyncSession = Depends(get_async_db)):
    result = await db.execute(
        select(ServiceType)
        .where(ServiceType.is_active.is_(True))
        .order_by(ServiceType.name)
    )
    return result.scalars().all()


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@router.post("/availability", response_model=AvailabilityResponse)
async def check_availability(
    body: AvailabilityRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Open and taken slots for a day, optionally for one coach."""
    return await get_availability(db, body)
