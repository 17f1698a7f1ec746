"""Package grants: turning a paid (or admin-issued) package into credits."""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.bookings_service.errors import PackageNotFound
from services.bookings_service.models import (
    PackageStatus,
    PurchasedPackage,
    SessionPackage,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def grant_package(
    db: AsyncSession,
    *,
    user_id: str,
    session_package_id: uuid.UUID,
    stripe_payment_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> PurchasedPackage:
    """Give a member a fresh instance of a package definition.

    Session count and expiry come from the ``SessionPackage``. A repeated
    grant for the same payment returns the package already granted.
    """
    if stripe_payment_id:
        result = await db.execute(
            select(PurchasedPackage).where(
                PurchasedPackage.user_id == user_id,
                PurchasedPackage.stripe_payment_id == stripe_payment_id,
            )
        )
        existing = result.scalar_one_or_none()
        if existing:
            logger.info(
                "Payment %s already granted as package %s",
                stripe_payment_id,
                existing.id,
            )
            return existing

    definition = await db.get(SessionPackage, session_package_id)
    if not definition or not definition.is_active:
        raise PackageNotFound()

    now = now or utc_now()
    package = PurchasedPackage(
        user_id=user_id,
        package=definition,
        sessions_total=definition.session_count,
        sessions_remaining=definition.session_count,
        purchased_at=now,
        expires_at=now + timedelta(days=definition.validity_days),
        status=PackageStatus.ACTIVE,
        stripe_payment_id=stripe_payment_id,
    )
    db.add(package)
    await db.commit()
    await db.refresh(package)

    logger.info(
        "Granted package %s (%d sessions, %s) to %s",
        package.id,
        package.sessions_total,
        definition.name,
        user_id,
    )
    return package
