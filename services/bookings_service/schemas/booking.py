"""Booking request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from services.bookings_service.models.enums import (
    BookingStatus,
    PaymentMethod,
    RequestedPaymentMethod,
)


class BookingCreateRequest(BaseModel):
    """Body of ``POST /bookings``.

    The four scheduling fields are optional at the schema level so that a
    missing one is reported by the booking handler as ``InvalidRequest``
    rather than a generic validation error. Accepts snake_case or the
    camelCase keys the web client sends.
    """

    service_type_id: Optional[uuid.UUID] = None
    coach_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    payment_method: Optional[RequestedPaymentMethod] = None
    purchased_package_id: Optional[uuid.UUID] = None
    amount_paid: Optional[float] = Field(default=None, ge=0)
    stripe_payment_id: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingResponse(BaseModel):
    id: uuid.UUID
    user_id: str
    service_type_id: uuid.UUID
    coach_id: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    payment_method: Optional[PaymentMethod] = None
    purchased_package_id: Optional[uuid.UUID] = None
    amount_paid: float
    stripe_payment_id: Optional[str] = None
    notes: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingEnvelope(BaseModel):
    booking: BookingResponse


class BookingListResponse(BaseModel):
    upcoming: list[BookingResponse]
    past: list[BookingResponse]
