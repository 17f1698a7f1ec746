"""Unit tests for the phase/week progression engine.

The engine is pure: tests build ``ProgressState`` values directly and never
touch the database.
"""

from datetime import datetime, timedelta, timezone

import pytest
from services.training_service.curriculum import (
    CurriculumDefinition,
    DrillDefinition,
    PhaseDefinition,
)
from services.training_service.errors import UnknownPhase
from services.training_service.progression import (
    BLOCKED_PRIORITY_DRILLS,
    PhaseEntry,
    PhaseStatus,
    ProgressState,
    advance,
    advancement_status,
    phase_statuses,
    start_progress,
    weekly_progress,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
EARLIER = NOW - timedelta(days=21)


def _curriculum(drills=()):
    return CurriculumDefinition(
        phases=[
            PhaseDefinition(name="Foundation", short_name="Foundation"),
            PhaseDefinition(name="Power", short_name="Power"),
            PhaseDefinition(name="Advanced", short_name="Advanced"),
        ],
        weeks_per_phase=4,
        drills=list(drills),
    )


def _drill(drill_id, phase="Foundation", week=1, priority=True, order=0):
    return DrillDefinition(
        id=drill_id,
        phase=phase,
        week=week,
        title=drill_id,
        is_priority=priority,
        sort_order=order,
    )


def _all_done(_drill_id: str) -> bool:
    return True


def _none_done(_drill_id: str) -> bool:
    return False


# ---------------------------------------------------------------------------
# advance
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_advance_within_phase_increments_week():
    curriculum = _curriculum()
    state = ProgressState("Foundation", 2, (PhaseEntry("Foundation", EARLIER),))

    result = advance(state, curriculum, NOW)

    assert result.current_phase == "Foundation"
    assert result.current_week == 3
    assert result.phases == state.phases


@pytest.mark.unit
def test_advance_from_final_week_moves_to_next_phase():
    curriculum = _curriculum()
    state = ProgressState("Foundation", 4, (PhaseEntry("Foundation", EARLIER),))

    result = advance(state, curriculum, NOW)

    assert result.current_phase == "Power"
    assert result.current_week == 1
    foundation = result.entry_for("Foundation")
    assert foundation.started_at == EARLIER
    assert foundation.completed_at == NOW
    power = result.entry_for("Power")
    assert power == PhaseEntry("Power", NOW, None)


@pytest.mark.unit
def test_advance_at_terminal_state_is_noop():
    curriculum = _curriculum()
    state = ProgressState(
        "Advanced",
        4,
        (
            PhaseEntry("Foundation", EARLIER, EARLIER),
            PhaseEntry("Power", EARLIER, EARLIER),
            PhaseEntry("Advanced", EARLIER),
        ),
    )

    assert advance(state, curriculum, NOW) == state


@pytest.mark.unit
def test_advance_opens_missing_phase_entry_before_closing_it():
    """A state with no entry for the current phase still gets one closed."""
    curriculum = _curriculum()
    state = ProgressState("Power", 4, ())

    result = advance(state, curriculum, NOW)

    assert result.entry_for("Power") == PhaseEntry("Power", NOW, NOW)
    assert result.entry_for("Advanced") == PhaseEntry("Advanced", NOW, None)


@pytest.mark.unit
def test_positions_only_move_forward():
    curriculum = _curriculum()
    state = start_progress(curriculum, EARLIER)
    seen = [(0, state.current_week)]

    for _ in range(20):
        state = advance(state, curriculum, NOW)
        seen.append(
            (curriculum.phase_index(state.current_phase), state.current_week)
        )

    assert seen == sorted(seen)
    assert seen[-1] == (2, 4)
    # 3 phases x 4 weeks = 12 positions, 11 forward steps then stuck
    assert len(set(seen)) == 12


# ---------------------------------------------------------------------------
# phase_statuses
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_phase_statuses_for_new_member():
    curriculum = _curriculum()
    state = start_progress(curriculum, NOW)

    assert phase_statuses(state, curriculum) == [
        ("Foundation", PhaseStatus.CURRENT),
        ("Power", PhaseStatus.LOCKED),
        ("Advanced", PhaseStatus.LOCKED),
    ]


@pytest.mark.unit
def test_phase_statuses_after_first_phase_completed():
    curriculum = _curriculum()
    state = ProgressState(
        "Power",
        1,
        (PhaseEntry("Foundation", EARLIER, NOW), PhaseEntry("Power", NOW)),
    )

    assert phase_statuses(state, curriculum) == [
        ("Foundation", PhaseStatus.COMPLETED),
        ("Power", PhaseStatus.CURRENT),
        ("Advanced", PhaseStatus.LOCKED),
    ]


@pytest.mark.unit
def test_phase_behind_current_without_completion_is_available():
    curriculum = _curriculum()
    state = ProgressState("Advanced", 1, (PhaseEntry("Advanced", NOW),))

    statuses = dict(phase_statuses(state, curriculum))

    assert statuses["Foundation"] == PhaseStatus.AVAILABLE
    assert statuses["Power"] == PhaseStatus.AVAILABLE
    assert statuses["Advanced"] == PhaseStatus.CURRENT


@pytest.mark.unit
def test_completed_takes_precedence_over_current():
    curriculum = _curriculum()
    state = ProgressState("Foundation", 2, (PhaseEntry("Foundation", EARLIER, NOW),))

    assert dict(phase_statuses(state, curriculum))["Foundation"] == (
        PhaseStatus.COMPLETED
    )


@pytest.mark.unit
def test_phase_statuses_unknown_current_phase():
    curriculum = _curriculum()
    state = ProgressState("Retired Phase", 1, ())

    with pytest.raises(UnknownPhase):
        phase_statuses(state, curriculum)


# ---------------------------------------------------------------------------
# advancement_status
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_can_advance_when_all_priority_drills_complete():
    curriculum = _curriculum(
        [
            _drill("tee-work", priority=True),
            _drill("soft-toss", priority=True, order=1),
            _drill("mobility", priority=False, order=2),
        ]
    )
    state = start_progress(curriculum, NOW)
    completed = {"tee-work", "soft-toss"}

    status = advancement_status(state, curriculum, completed.__contains__)

    assert status.can_advance is True
    assert status.can_advance_week is True
    assert status.can_advance_phase is False
    assert status.blocked_reason is None
    assert status.weekly_progress == 67


@pytest.mark.unit
def test_cannot_advance_with_open_priority_drill():
    curriculum = _curriculum(
        [_drill("tee-work"), _drill("soft-toss", order=1)]
    )
    state = start_progress(curriculum, NOW)

    status = advancement_status(state, curriculum, {"tee-work"}.__contains__)

    assert status.can_advance is False
    assert status.can_advance_week is False
    assert status.blocked_reason == BLOCKED_PRIORITY_DRILLS


@pytest.mark.unit
def test_only_current_week_drills_gate_advancement():
    curriculum = _curriculum(
        [
            _drill("week-1-drill", week=1),
            _drill("week-2-drill", week=2),
            _drill("power-drill", phase="Power", week=1),
        ]
    )
    state = start_progress(curriculum, NOW)

    status = advancement_status(state, curriculum, {"week-1-drill"}.__contains__)

    assert status.can_advance is True


@pytest.mark.unit
def test_week_without_priority_drills_is_passable():
    curriculum = _curriculum([_drill("optional", priority=False)])
    state = start_progress(curriculum, NOW)

    status = advancement_status(state, curriculum, _none_done)

    assert status.can_advance is True
    assert status.weekly_progress == 0


@pytest.mark.unit
def test_final_week_reports_phase_advance():
    curriculum = _curriculum()
    state = ProgressState("Foundation", 4, (PhaseEntry("Foundation", EARLIER),))

    status = advancement_status(state, curriculum, _all_done)

    assert status.can_advance_week is False
    assert status.can_advance_phase is True
    assert status.is_terminal is False


@pytest.mark.unit
def test_terminal_state_reported():
    curriculum = _curriculum()
    state = ProgressState("Advanced", 4, (PhaseEntry("Advanced", EARLIER),))

    status = advancement_status(state, curriculum, _all_done)

    assert status.is_terminal is True
    assert status.can_advance_phase is False
    assert status.can_advance_week is False


# ---------------------------------------------------------------------------
# weekly_progress
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_weekly_progress_rounds_percentage():
    curriculum = _curriculum(
        [_drill("a"), _drill("b", order=1), _drill("c", order=2)]
    )
    state = start_progress(curriculum, NOW)

    assert weekly_progress(state, curriculum, {"a"}.__contains__) == 33
    assert weekly_progress(state, curriculum, _all_done) == 100


@pytest.mark.unit
def test_start_progress_opens_first_phase():
    curriculum = _curriculum()

    state = start_progress(curriculum, NOW)

    assert state.current_phase == "Foundation"
    assert state.current_week == 1
    assert state.phases == (PhaseEntry("Foundation", NOW, None),)
