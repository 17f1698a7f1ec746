"""Enums for the Bookings Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class PaymentMethod(str, enum.Enum):
    """How a stored booking was paid for."""

    CREDITS = "credits"
    PACKAGE = "package"
    DIRECT_PAY = "direct_pay"


class RequestedPaymentMethod(str, enum.Enum):
    """Payment methods a caller may ask for.

    ``hybrid_credit`` draws on the member's hybrid credit allowance and is
    stored on the booking as ``credits``.
    """

    CREDITS = "credits"
    PACKAGE = "package"
    DIRECT_PAY = "direct_pay"
    HYBRID_CREDIT = "hybrid_credit"


class PackageStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    DEPLETED = "depleted"


class ServiceKind(str, enum.Enum):
    LESSON = "lesson"
    CLASS = "class"
    CAMP = "camp"
    ASSESSMENT = "assessment"
