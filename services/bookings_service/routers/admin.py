"""Admin booking and package management endpoints."""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.bookings_service.integrations import notify_package_granted
from services.bookings_service.schemas import (
    BookingEnvelope,
    BookingResponse,
    GrantPackageRequest,
    PurchasedPackageResponse,
)
from services.bookings_service.services.booking_ops import cancel_booking
from services.bookings_service.services.package_ops import grant_package
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/admin/bookings", tags=["admin-bookings"])


@router.post("/{booking_id}/cancel", response_model=BookingEnvelope)
async def admin_cancel_booking(
    booking_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel any member's booking."""
    booking = await cancel_booking(db, user_id=None, booking_id=booking_id)
    logger.info("Admin %s cancelled booking %s", admin.user_id, booking.id)
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.post(
    "/packages/grant",
    response_model=PurchasedPackageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def admin_grant_package(
    body: GrantPackageRequest,
    background_tasks: BackgroundTasks,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Grant a member a package, e.g. after a confirmed checkout payment."""
    package = await grant_package(
        db,
        user_id=body.user_id,
        session_package_id=body.session_package_id,
        stripe_payment_id=body.stripe_payment_id,
    )
    background_tasks.add_task(
        notify_package_granted, package, body.email, body.name, body.amount_paid
    )
    return package
