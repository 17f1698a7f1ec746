"""Booking-specific failures. All abort the booking with nothing written."""

from libs.common.errors import Conflict, NotFound, ServiceError


class SlotUnavailable(Conflict):
    code = "slot_unavailable"
    default_message = "This time slot is no longer available"


class PackageNotFound(NotFound):
    code = "package_not_found"
    default_message = "Package not found or not active"


class NoCreditsRemaining(ServiceError):
    status_code = 402
    code = "no_credits_remaining"
    default_message = "No sessions remaining in package"


class PackageExpired(ServiceError):
    status_code = 410
    code = "package_expired"
    default_message = "Package has expired"


class BookingNotFound(NotFound):
    code = "booking_not_found"
    default_message = "Booking not found"
