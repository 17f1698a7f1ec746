"""Availability lookup schemas."""

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AvailabilityRequest(BaseModel):
    date: Optional[dt.date] = None
    coach_id: Optional[str] = None
    service_type_id: Optional[uuid.UUID] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeSlot(BaseModel):
    start_time: str
    end_time: str
    available: bool


class AvailabilityResponse(BaseModel):
    date: dt.date
    slots: list[TimeSlot]
