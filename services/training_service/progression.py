"""Phase/week progression engine.

Pure functions over immutable values: nothing here touches the database or
reads settings. A member's position is ``(phase_index, week)``; positions
only move forward, one week at a time, and the last week of the last phase
is terminal.
"""

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Optional

from services.training_service.curriculum import CurriculumDefinition

DrillPredicate = Callable[[str], bool]

BLOCKED_PRIORITY_DRILLS = "Complete all priority drills to advance"


class PhaseStatus(str, enum.Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    LOCKED = "locked"
    # Behind the current phase but never completed (e.g. progress edited by hand)
    AVAILABLE = "available"


@dataclass(frozen=True)
class PhaseEntry:
    phase: str
    started_at: datetime
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProgressState:
    current_phase: str
    current_week: int
    phases: tuple[PhaseEntry, ...] = field(default_factory=tuple)

    def entry_for(self, phase: str) -> Optional[PhaseEntry]:
        return next((e for e in self.phases if e.phase == phase), None)


@dataclass(frozen=True)
class AdvancementStatus:
    can_advance: bool
    can_advance_week: bool
    can_advance_phase: bool
    is_terminal: bool
    priority_drills_complete: bool
    weekly_progress: int
    blocked_reason: Optional[str] = None


def start_progress(curriculum: CurriculumDefinition, now: datetime) -> ProgressState:
    """First phase, week 1, with the first phase entry opened at ``now``."""
    first = curriculum.first_phase
    return ProgressState(
        current_phase=first,
        current_week=1,
        phases=(PhaseEntry(phase=first, started_at=now),),
    )


def phase_statuses(
    progress: ProgressState, curriculum: CurriculumDefinition
) -> list[tuple[str, PhaseStatus]]:
    """Display status of every phase, in curriculum order."""
    current_index = curriculum.phase_index(progress.current_phase)
    statuses = []
    for index, name in enumerate(curriculum.phase_names):
        entry = progress.entry_for(name)
        if entry is not None and entry.completed_at is not None:
            status = PhaseStatus.COMPLETED
        elif name == progress.current_phase:
            status = PhaseStatus.CURRENT
        elif index > current_index:
            status = PhaseStatus.LOCKED
        else:
            status = PhaseStatus.AVAILABLE
        statuses.append((name, status))
    return statuses


def is_terminal(progress: ProgressState, curriculum: CurriculumDefinition) -> bool:
    return (
        curriculum.is_last_phase(progress.current_phase)
        and progress.current_week >= curriculum.weeks_per_phase
    )


def weekly_progress(
    progress: ProgressState,
    curriculum: CurriculumDefinition,
    is_drill_completed: DrillPredicate,
) -> int:
    """Percentage of the current week's drills completed, rounded."""
    drills = curriculum.drills_for(progress.current_phase, progress.current_week)
    if not drills:
        return 0
    done = sum(1 for d in drills if is_drill_completed(d.id))
    return round(done / len(drills) * 100)


def advancement_status(
    progress: ProgressState,
    curriculum: CurriculumDefinition,
    is_drill_completed: DrillPredicate,
) -> AdvancementStatus:
    """Whether the member may move on from their current week.

    Only the priority drills of the current (phase, week) gate advancement;
    a week without priority drills is always passable.
    """
    curriculum.phase_index(progress.current_phase)
    drills = curriculum.drills_for(progress.current_phase, progress.current_week)
    priority_complete = all(
        is_drill_completed(d.id) for d in drills if d.is_priority
    )
    last_week = progress.current_week >= curriculum.weeks_per_phase
    terminal = is_terminal(progress, curriculum)

    return AdvancementStatus(
        can_advance=priority_complete,
        can_advance_week=priority_complete and not last_week,
        can_advance_phase=priority_complete and last_week and not terminal,
        is_terminal=terminal,
        priority_drills_complete=priority_complete,
        weekly_progress=weekly_progress(progress, curriculum, is_drill_completed),
        blocked_reason=None if priority_complete else BLOCKED_PRIORITY_DRILLS,
    )


def _upsert_entry(
    entries: tuple[PhaseEntry, ...], entry: PhaseEntry
) -> tuple[PhaseEntry, ...]:
    if any(e.phase == entry.phase for e in entries):
        return tuple(entry if e.phase == entry.phase else e for e in entries)
    return entries + (entry,)


def advance(
    progress: ProgressState, curriculum: CurriculumDefinition, now: datetime
) -> ProgressState:
    """Move one step forward.

    Inside a phase this is the next week. From a phase's final week it closes
    that phase's entry, opens the next phase at week 1 and records its start.
    At the terminal position the state is returned unchanged. Eligibility is
    the caller's concern (see ``advancement_status``).
    """
    if is_terminal(progress, curriculum):
        return progress

    if progress.current_week < curriculum.weeks_per_phase:
        return replace(progress, current_week=progress.current_week + 1)

    current = progress.current_phase
    next_phase = curriculum.phase_names[curriculum.phase_index(current) + 1]

    closing = progress.entry_for(current) or PhaseEntry(phase=current, started_at=now)
    entries = _upsert_entry(progress.phases, replace(closing, completed_at=now))
    entries = _upsert_entry(entries, PhaseEntry(phase=next_phase, started_at=now))

    return ProgressState(current_phase=next_phase, current_week=1, phases=entries)
