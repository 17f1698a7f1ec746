"""Curriculum definition: ordered phases, weeks per phase and weekly drills.

The curriculum is an immutable value. Services load it once through
``get_curriculum()`` and hand it to the progression engine explicitly.
"""

import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from pydantic import BaseModel, ConfigDict, Field, model_validator
from services.training_service.errors import UnknownPhase

logger = get_logger(__name__)


class PhaseDefinition(BaseModel):
    name: str
    short_name: str
    description: str = ""
    focus: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class DrillDefinition(BaseModel):
    id: str
    phase: str
    week: int = Field(ge=1)
    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration_minutes: int = Field(default=10, ge=0)
    is_priority: bool = False
    sort_order: int = 0

    model_config = ConfigDict(frozen=True)


class CurriculumDefinition(BaseModel):
    phases: tuple[PhaseDefinition, ...] = Field(min_length=1)
    weeks_per_phase: int = Field(ge=1)
    drills: tuple[DrillDefinition, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_consistency(self) -> "CurriculumDefinition":
        names = [phase.name for phase in self.phases]
        if len(set(names)) != len(names):
            raise ValueError("phase names must be unique")

        drill_ids = [drill.id for drill in self.drills]
        if len(set(drill_ids)) != len(drill_ids):
            raise ValueError("drill ids must be unique")

        for drill in self.drills:
            if drill.phase not in names:
                raise ValueError(f"drill {drill.id!r} references unknown phase {drill.phase!r}")
            if drill.week > self.weeks_per_phase:
                raise ValueError(
                    f"drill {drill.id!r} week {drill.week} exceeds weeks_per_phase"
                )
        return self

    @property
    def phase_names(self) -> list[str]:
        return [phase.name for phase in self.phases]

    @property
    def first_phase(self) -> str:
        return self.phases[0].name

    def phase_index(self, name: str) -> int:
        """Ordinal of ``name``; ``UnknownPhase`` if it is not in this curriculum."""
        for index, phase in enumerate(self.phases):
            if phase.name == name:
                return index
        raise UnknownPhase(details={"phase": name})

    def is_last_phase(self, name: str) -> bool:
        return self.phase_index(name) == len(self.phases) - 1

    def drills_for(self, phase: str, week: int) -> list[DrillDefinition]:
        return sorted(
            (d for d in self.drills if d.phase == phase and d.week == week),
            key=lambda d: d.sort_order,
        )

    def get_drill(self, drill_id: str) -> Optional[DrillDefinition]:
        return next((d for d in self.drills if d.id == drill_id), None)


# ---------------------------------------------------------------------------
# Built-in hitting curriculum
# ---------------------------------------------------------------------------

DEFAULT_WEEKS_PER_PHASE = 3

DEFAULT_PHASES = (
    PhaseDefinition(
        name="Phase 1: Foundation",
        short_name="Foundation",
        description="Build the fundamentals of an elite swing",
        focus=("Stance & Balance", "Load Position", "Connection"),
    ),
    PhaseDefinition(
        name="Phase 2: Power Development",
        short_name="Power",
        description="Develop rotational power and bat speed",
        focus=("Hip Rotation", "Separation", "Ground Force"),
    ),
    PhaseDefinition(
        name="Phase 3: Timing & Recognition",
        short_name="Timing",
        description="Master pitch tracking and timing adjustments",
        focus=("Pitch Tracking", "Rhythm", "Velocity Adjustment"),
    ),
    PhaseDefinition(
        name="Phase 4: Contact & Adjustment",
        short_name="Contact",
        description="Refine barrel control and in-game adjustments",
        focus=("Barrel Control", "Pitch Zones", "Situational Hitting"),
    ),
    PhaseDefinition(
        name="Phase 5: Game Integration",
        short_name="Integration",
        description="Apply skills in competitive situations",
        focus=("At-Bat Strategy", "Mental Game", "Competition Ready"),
    ),
)


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def _default_drills() -> tuple[DrillDefinition, ...]:
    # One drill per focus area each week; the week's own focus area is the
    # priority drill.
    drills = []
    for phase in DEFAULT_PHASES:
        for week in range(1, DEFAULT_WEEKS_PER_PHASE + 1):
            for order, focus in enumerate(phase.focus):
                drills.append(
                    DrillDefinition(
                        id=f"{_slug(phase.short_name)}-w{week}-{_slug(focus)}",
                        phase=phase.name,
                        week=week,
                        title=focus,
                        duration_minutes=15,
                        is_priority=order == (week - 1) % len(phase.focus),
                        sort_order=order,
                    )
                )
    return tuple(drills)


DEFAULT_CURRICULUM = CurriculumDefinition(
    phases=DEFAULT_PHASES,
    weeks_per_phase=DEFAULT_WEEKS_PER_PHASE,
    drills=_default_drills(),
)


def load_curriculum(path: str) -> CurriculumDefinition:
    """Read and validate a curriculum JSON file."""
    curriculum = CurriculumDefinition.model_validate_json(Path(path).read_text())
    logger.info(
        "Loaded curriculum from %s (%d phases, %d weeks each, %d drills)",
        path,
        len(curriculum.phases),
        curriculum.weeks_per_phase,
        len(curriculum.drills),
    )
    return curriculum


@lru_cache
def get_curriculum() -> CurriculumDefinition:
    """The configured curriculum, cached for the life of the process."""
    settings = get_settings()
    if settings.CURRICULUM_PATH:
        return load_curriculum(settings.CURRICULUM_PATH)
    return DEFAULT_CURRICULUM
