"""Fire-and-forget collaborators called after a booking or package grant.

None of these calls can undo or fail the committed change: each is skipped
when its settings are missing and ``best_effort_request`` logs instead of
raising.
"""

from typing import Optional

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.service_client import best_effort_request
from services.bookings_service.models import Booking, PurchasedPackage

logger = get_logger(__name__)

CRM_API_VERSION = "2021-07-28"
ACTIVE_TRAINEE_TAG = "Active Trainee"
PACKAGE_PURCHASE_TAG = "Package Purchase"
PAYING_CUSTOMER_TAG = "Paying Customer"


def _crm_headers(api_key: str) -> dict:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Version": CRM_API_VERSION,
    }


def _split_name(name: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    if not name:
        return None, None
    first, _, last = name.partition(" ")
    return first, last


async def _find_crm_contact_id(email: str) -> Optional[str]:
    settings = get_settings()
    response = await best_effort_request(
        method="GET",
        url=f"{settings.CRM_API_URL}/contacts/",
        purpose="crm.find_contact",
        params={"locationId": settings.CRM_LOCATION_ID, "query": email},
        headers=_crm_headers(settings.CRM_API_KEY),
    )
    if response is None:
        return None
    for contact in response.json().get("contacts") or []:
        if (contact.get("email") or "").lower() == email.lower():
            return contact.get("id")
    return None


def _crm_configured() -> bool:
    settings = get_settings()
    return bool(settings.CRM_API_KEY and settings.CRM_LOCATION_ID)


async def _upsert_crm_contact(
    *, email: str, name: Optional[str], tags: list[str]
) -> None:
    settings = get_settings()
    first_name, last_name = _split_name(name)
    payload = {
        "locationId": settings.CRM_LOCATION_ID,
        "email": email,
        "firstName": first_name,
        "lastName": last_name,
        "tags": tags,
    }

    contact_id = await _find_crm_contact_id(email)
    if contact_id:
        await best_effort_request(
            method="PUT",
            url=f"{settings.CRM_API_URL}/contacts/{contact_id}",
            purpose="crm.update_contact",
            json=payload,
            headers=_crm_headers(settings.CRM_API_KEY),
        )
    else:
        await best_effort_request(
            method="POST",
            url=f"{settings.CRM_API_URL}/contacts/",
            purpose="crm.create_contact",
            json=payload,
            headers=_crm_headers(settings.CRM_API_KEY),
        )


async def sync_booking_to_crm(
    *, email: str, name: Optional[str], service_name: str
) -> None:
    """Upsert the member as a CRM contact tagged with the booked service."""
    if not _crm_configured():
        logger.debug("CRM not configured; skipping booking sync")
        return
    await _upsert_crm_contact(
        email=email,
        name=name,
        tags=[f"Booked: {service_name}", ACTIVE_TRAINEE_TAG],
    )


async def sync_purchase_to_crm(
    *, email: str, name: Optional[str], tier: str, amount: float
) -> None:
    """Tag the member as a paying package customer."""
    if not _crm_configured():
        logger.debug("CRM not configured; skipping purchase sync")
        return
    await _upsert_crm_contact(
        email=email,
        name=name,
        tags=[f"Tier: {tier}", PACKAGE_PURCHASE_TAG, PAYING_CUSTOMER_TAG],
    )
    logger.info("Purchase synced to CRM email=%s tier=%s amount=%.2f", email, tier, amount)


async def notify_package_granted(
    package: PurchasedPackage,
    email: Optional[str],
    name: Optional[str],
    amount: float,
) -> None:
    """CRM purchase sync after a package grant; failures are logged only."""
    if not email:
        logger.info("No email for package %s; skipping CRM purchase sync", package.id)
        return
    try:
        await sync_purchase_to_crm(
            email=email,
            name=name,
            tier=f"{package.sessions_total}-Pack",
            amount=amount,
        )
    except Exception:
        logger.exception("CRM purchase sync failed for package %s", package.id)


async def send_booking_confirmation(
    *,
    booking: Booking,
    email: str,
    name: Optional[str],
    service_name: str,
) -> None:
    """Ask the notifications service to email the booking confirmation."""
    settings = get_settings()
    if not settings.NOTIFICATIONS_URL:
        logger.debug("Notifications not configured; skipping confirmation")
        return

    await best_effort_request(
        method="POST",
        url=f"{settings.NOTIFICATIONS_URL}/booking-confirmation",
        purpose="notifications.booking_confirmation",
        json={
            "bookingId": str(booking.id),
            "customerEmail": email,
            "customerName": name,
            "serviceName": service_name,
            "startTime": booking.start_time.isoformat(),
            "endTime": booking.end_time.isoformat(),
            "paymentMethod": (
                booking.payment_method.value if booking.payment_method else None
            ),
            "amountPaid": booking.amount_paid,
        },
    )


async def notify_booking_created(
    booking: Booking, user: AuthUser, service_name: str
) -> None:
    """Run both collaborators; nothing escapes to the caller."""
    if not user.email:
        logger.info("No email for user %s; skipping booking notifications", user.user_id)
        return
    try:
        await sync_booking_to_crm(
            email=user.email, name=user.name, service_name=service_name
        )
        await send_booking_confirmation(
            booking=booking,
            email=user.email,
            name=user.name,
            service_name=service_name,
        )
    except Exception:
        logger.exception("Post-booking notifications failed for %s", booking.id)
