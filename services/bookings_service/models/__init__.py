"""Bookings Service models package.

Re-exports every model so ``from services.bookings_service.models import X``
works and ``Base.metadata`` sees all tables once this package is imported.
"""

from services.bookings_service.models.booking import Booking  # noqa: F401
from services.bookings_service.models.enums import (  # noqa: F401
    BookingStatus,
    PackageStatus,
    PaymentMethod,
    RequestedPaymentMethod,
    ServiceKind,
    enum_values,
)
from services.bookings_service.models.package import (  # noqa: F401
    MemberCredits,
    PurchasedPackage,
    SessionPackage,
)
from services.bookings_service.models.schedule import (  # noqa: F401
    BlockedTime,
    CoachAvailability,
    ServiceType,
)

__all__ = [
    "BlockedTime",
    "Booking",
    "BookingStatus",
    "CoachAvailability",
    "MemberCredits",
    "PackageStatus",
    "PaymentMethod",
    "PurchasedPackage",
    "RequestedPaymentMethod",
    "ServiceKind",
    "ServiceType",
    "SessionPackage",
    "enum_values",
]
