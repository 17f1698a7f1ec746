"""Persistence around the progression engine.

The engine works on ``ProgressState`` values; this module loads them from
``MemberProgress`` rows, and writes advances back with a compare-and-swap on
``MemberProgress.version`` so two concurrent advances cannot both land.
"""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import PersistenceFailure
from libs.common.logging import get_logger
from services.training_service.curriculum import CurriculumDefinition
from services.training_service.errors import (
    AdvanceNotAllowed,
    DrillNotFound,
    ProgressConflict,
)
from services.training_service.models import (
    DrillCompletion,
    MemberProgress,
    PhaseProgress,
)
from services.training_service.progression import (
    PhaseEntry,
    ProgressState,
    advance,
    advancement_status,
    phase_statuses,
    start_progress,
)
from services.training_service.schemas import (
    AdvancementResponse,
    DashboardResponse,
    DrillResponse,
    PhaseStatusResponse,
    ProgressResponse,
    WeeklyDrillResponse,
)
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def to_state(progress: MemberProgress) -> ProgressState:
    return ProgressState(
        current_phase=progress.current_phase,
        current_week=progress.current_week,
        phases=tuple(
            PhaseEntry(
                phase=entry.phase,
                started_at=entry.started_at,
                completed_at=entry.completed_at,
            )
            for entry in progress.phases
        ),
    )


async def _get_progress(db: AsyncSession, user_id: str) -> Optional[MemberProgress]:
    result = await db.execute(
        select(MemberProgress).where(MemberProgress.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_progress(
    db: AsyncSession,
    *,
    user_id: str,
    curriculum: CurriculumDefinition,
    now: Optional[datetime] = None,
) -> MemberProgress:
    """Load the member's progress, starting them on the first phase if new."""
    progress = await _get_progress(db, user_id)
    if progress:
        return progress

    state = start_progress(curriculum, now or utc_now())
    progress = MemberProgress(
        user_id=user_id,
        current_phase=state.current_phase,
        current_week=state.current_week,
        version=1,
        phases=[
            PhaseProgress(phase=e.phase, started_at=e.started_at)
            for e in state.phases
        ],
    )
    db.add(progress)
    try:
        await db.commit()
    except IntegrityError:
        # Another request created the row first
        await db.rollback()
        progress = await _get_progress(db, user_id)
        if progress is None:
            raise PersistenceFailure()
        return progress

    await db.refresh(progress)
    logger.info("Started progress for %s at %s", user_id, state.current_phase)
    return progress


async def completed_drill_ids(db: AsyncSession, user_id: str) -> set[str]:
    result = await db.execute(
        select(DrillCompletion.drill_id).where(DrillCompletion.user_id == user_id)
    )
    return set(result.scalars().all())


async def set_drill_completion(
    db: AsyncSession,
    *,
    user_id: str,
    drill_id: str,
    completed: bool,
    curriculum: CurriculumDefinition,
    notes: Optional[str] = None,
) -> bool:
    """Mark a drill done or not done. Repeating either is harmless."""
    if curriculum.get_drill(drill_id) is None:
        raise DrillNotFound(details={"drill_id": drill_id})

    if not completed:
        await db.execute(
            delete(DrillCompletion).where(
                DrillCompletion.user_id == user_id,
                DrillCompletion.drill_id == drill_id,
            )
        )
        await db.commit()
        logger.info("Drill %s unmarked for %s", drill_id, user_id)
        return False

    existing = await db.execute(
        select(DrillCompletion).where(
            DrillCompletion.user_id == user_id,
            DrillCompletion.drill_id == drill_id,
        )
    )
    if existing.scalar_one_or_none() is None:
        db.add(DrillCompletion(user_id=user_id, drill_id=drill_id, notes=notes))
        try:
            await db.commit()
        except IntegrityError:
            # Recorded concurrently; the drill is complete either way
            await db.rollback()
            logger.info("Drill %s already recorded for %s", drill_id, user_id)
            return True
        logger.info("Drill %s completed by %s", drill_id, user_id)
    return True


async def get_dashboard(
    db: AsyncSession,
    *,
    user_id: str,
    curriculum: CurriculumDefinition,
) -> DashboardResponse:
    """Phase statuses, advancement and this week's drills for the member."""
    progress = await get_or_create_progress(
        db, user_id=user_id, curriculum=curriculum
    )
    state = to_state(progress)
    done = await completed_drill_ids(db, user_id)

    phases = []
    for phase, (name, status) in zip(
        curriculum.phases, phase_statuses(state, curriculum)
    ):
        entry = state.entry_for(name)
        phases.append(
            PhaseStatusResponse(
                name=name,
                short_name=phase.short_name,
                description=phase.description,
                focus=list(phase.focus),
                status=status,
                started_at=entry.started_at if entry else None,
                completed_at=entry.completed_at if entry else None,
            )
        )

    drills = [
        WeeklyDrillResponse(
            **DrillResponse.model_validate(drill).model_dump(),
            completed=drill.id in done,
        )
        for drill in curriculum.drills_for(state.current_phase, state.current_week)
    ]

    return DashboardResponse(
        progress=ProgressResponse.model_validate(progress),
        phases=phases,
        advancement=AdvancementResponse.model_validate(
            advancement_status(state, curriculum, done.__contains__)
        ),
        drills=drills,
    )


async def advance_member_progress(
    db: AsyncSession,
    *,
    user_id: str,
    curriculum: CurriculumDefinition,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> MemberProgress:
    """Advance the member one week (or into the next phase).

    Raises:
        AdvanceNotAllowed: a priority drill of the current week is open.
        ProgressConflict: the record changed since it was read.
    """
    now = now or utc_now()
    progress = await get_or_create_progress(
        db, user_id=user_id, curriculum=curriculum, now=now
    )
    if expected_version is not None and expected_version != progress.version:
        raise ProgressConflict()

    state = to_state(progress)
    done = await completed_drill_ids(db, user_id)
    status = advancement_status(state, curriculum, done.__contains__)
    if not status.can_advance:
        raise AdvanceNotAllowed(status.blocked_reason)
    if status.is_terminal:
        logger.info("Progress for %s already at the final week; nothing to do", user_id)
        return progress

    new_state = advance(state, curriculum, now)
    read_version = progress.version

    try:
        swapped = await db.execute(
            update(MemberProgress)
            .where(
                MemberProgress.id == progress.id,
                MemberProgress.version == read_version,
            )
            .values(
                current_phase=new_state.current_phase,
                current_week=new_state.current_week,
                version=read_version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if swapped.rowcount != 1:
            raise ProgressConflict()

        rows = {row.phase: row for row in progress.phases}
        for entry in new_state.phases:
            row = rows.get(entry.phase)
            if row is None:
                progress.phases.append(
                    PhaseProgress(
                        phase=entry.phase,
                        started_at=entry.started_at,
                        completed_at=entry.completed_at,
                    )
                )
            elif (row.started_at, row.completed_at) != (
                entry.started_at,
                entry.completed_at,
            ):
                row.started_at = entry.started_at
                row.completed_at = entry.completed_at
        await db.commit()
    except ProgressConflict:
        await db.rollback()
        logger.info("Lost advance race for %s at version %d", user_id, read_version)
        raise
    except IntegrityError as exc:
        await db.rollback()
        raise ProgressConflict() from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Database error while advancing %s", user_id)
        raise PersistenceFailure() from exc

    await db.refresh(progress)
    logger.info(
        "Advanced %s: %s w%d -> %s w%d",
        user_id,
        state.current_phase,
        state.current_week,
        new_state.current_phase,
        new_state.current_week,
    )
    return progress
