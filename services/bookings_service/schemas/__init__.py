"""Bookings Service schemas package.

Re-exports all schemas so routers can import from
``services.bookings_service.schemas`` directly.
"""

from services.bookings_service.schemas.availability import (  # noqa: F401
    AvailabilityRequest,
    AvailabilityResponse,
    TimeSlot,
)
from services.bookings_service.schemas.booking import (  # noqa: F401
    BookingCreateRequest,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
)
from services.bookings_service.schemas.package import (  # noqa: F401
    GrantPackageRequest,
    PurchasedPackageResponse,
    ServiceTypeResponse,
    SessionPackageResponse,
)
