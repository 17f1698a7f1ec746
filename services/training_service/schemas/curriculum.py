"""Curriculum read schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class PhaseResponse(BaseModel):
    name: str
    short_name: str
    description: str
    focus: list[str]

    model_config = ConfigDict(from_attributes=True)


class DrillResponse(BaseModel):
    id: str
    phase: str
    week: int
    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration_minutes: int
    is_priority: bool
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class CurriculumResponse(BaseModel):
    phases: list[PhaseResponse]
    weeks_per_phase: int
    drills: list[DrillResponse]

    model_config = ConfigDict(from_attributes=True)
