"""Package and credit schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from services.bookings_service.models.enums import PackageStatus, ServiceKind


class SessionPackageResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    session_count: int
    base_price: float
    member_price: float
    validity_days: int

    model_config = ConfigDict(from_attributes=True)


class PurchasedPackageResponse(BaseModel):
    id: uuid.UUID
    user_id: str
    package_id: Optional[uuid.UUID] = None
    sessions_total: int
    sessions_remaining: int
    purchased_at: datetime
    expires_at: datetime
    status: PackageStatus
    package: Optional[SessionPackageResponse] = None

    model_config = ConfigDict(from_attributes=True)


class ServiceTypeResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    duration_minutes: int
    base_price: float
    member_price: float
    kind: ServiceKind
    max_participants: int

    model_config = ConfigDict(from_attributes=True)


class GrantPackageRequest(BaseModel):
    """Body of ``POST /admin/bookings/packages/grant``.

    ``email``, ``name`` and ``amount_paid`` only feed the CRM purchase sync.
    """

    user_id: str
    session_package_id: uuid.UUID
    stripe_payment_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    amount_paid: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
