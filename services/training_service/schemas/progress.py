"""Progress dashboard and mutation schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from services.training_service.progression import PhaseStatus
from services.training_service.schemas.curriculum import DrillResponse


class ProgressResponse(BaseModel):
    user_id: str
    current_phase: str
    current_week: int
    version: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PhaseStatusResponse(BaseModel):
    name: str
    short_name: str
    description: str
    focus: list[str]
    status: PhaseStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class AdvancementResponse(BaseModel):
    can_advance: bool
    can_advance_week: bool
    can_advance_phase: bool
    is_terminal: bool
    priority_drills_complete: bool
    weekly_progress: int
    blocked_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WeeklyDrillResponse(DrillResponse):
    completed: bool = False


class DashboardResponse(BaseModel):
    progress: ProgressResponse
    phases: list[PhaseStatusResponse]
    advancement: AdvancementResponse
    drills: list[WeeklyDrillResponse]


class AdvanceRequest(BaseModel):
    """Optional guard: refuse the advance if the record moved past this version."""

    expected_version: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DrillCompletionRequest(BaseModel):
    notes: Optional[str] = None


class DrillCompletionResponse(BaseModel):
    drill_id: str
    completed: bool
