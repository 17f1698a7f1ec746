"""Unit tests for curriculum validation and loading."""

import json

import pytest
from libs.common.config import get_settings
from pydantic import ValidationError
from services.training_service import curriculum as curriculum_module
from services.training_service.curriculum import (
    DEFAULT_CURRICULUM,
    CurriculumDefinition,
    get_curriculum,
    load_curriculum,
)
from services.training_service.errors import UnknownPhase


def _payload(**overrides):
    payload = {
        "phases": [
            {"name": "Foundation", "short_name": "Foundation"},
            {"name": "Power", "short_name": "Power"},
        ],
        "weeks_per_phase": 2,
        "drills": [
            {
                "id": "tee-work",
                "phase": "Foundation",
                "week": 1,
                "title": "Tee Work",
                "is_priority": True,
            }
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
def test_default_curriculum_shape():
    assert DEFAULT_CURRICULUM.phase_names == [
        "Phase 1: Foundation",
        "Phase 2: Power Development",
        "Phase 3: Timing & Recognition",
        "Phase 4: Contact & Adjustment",
        "Phase 5: Game Integration",
    ]
    assert DEFAULT_CURRICULUM.weeks_per_phase == 3
    for phase in DEFAULT_CURRICULUM.phase_names:
        for week in range(1, 4):
            drills = DEFAULT_CURRICULUM.drills_for(phase, week)
            assert drills
            assert sum(1 for d in drills if d.is_priority) == 1


@pytest.mark.unit
def test_curriculum_is_immutable():
    with pytest.raises(ValidationError):
        DEFAULT_CURRICULUM.weeks_per_phase = 10


@pytest.mark.unit
def test_rejects_duplicate_phase_names():
    payload = _payload(
        phases=[
            {"name": "Foundation", "short_name": "A"},
            {"name": "Foundation", "short_name": "B"},
        ]
    )
    with pytest.raises(ValidationError, match="phase names must be unique"):
        CurriculumDefinition.model_validate(payload)


@pytest.mark.unit
def test_rejects_drill_week_beyond_phase_length():
    payload = _payload()
    payload["drills"][0]["week"] = 3
    with pytest.raises(ValidationError, match="exceeds weeks_per_phase"):
        CurriculumDefinition.model_validate(payload)


@pytest.mark.unit
def test_rejects_drill_for_unknown_phase():
    payload = _payload()
    payload["drills"][0]["phase"] = "Advanced"
    with pytest.raises(ValidationError, match="unknown phase"):
        CurriculumDefinition.model_validate(payload)


@pytest.mark.unit
def test_rejects_zero_weeks_and_empty_phases():
    with pytest.raises(ValidationError):
        CurriculumDefinition.model_validate(_payload(weeks_per_phase=0))
    with pytest.raises(ValidationError):
        CurriculumDefinition.model_validate(_payload(phases=[], drills=[]))


@pytest.mark.unit
def test_phase_index_unknown_phase():
    curriculum = CurriculumDefinition.model_validate(_payload())

    assert curriculum.phase_index("Power") == 1
    with pytest.raises(UnknownPhase):
        curriculum.phase_index("Advanced")


@pytest.mark.unit
def test_drills_for_sorted_by_sort_order():
    payload = _payload(
        drills=[
            {"id": "b", "phase": "Foundation", "week": 1, "title": "B", "sort_order": 2},
            {"id": "a", "phase": "Foundation", "week": 1, "title": "A", "sort_order": 1},
        ]
    )
    curriculum = CurriculumDefinition.model_validate(payload)

    assert [d.id for d in curriculum.drills_for("Foundation", 1)] == ["a", "b"]


@pytest.mark.unit
def test_load_curriculum_from_json_file(tmp_path):
    path = tmp_path / "curriculum.json"
    path.write_text(json.dumps(_payload()))

    curriculum = load_curriculum(str(path))

    assert curriculum.phase_names == ["Foundation", "Power"]
    assert curriculum.get_drill("tee-work").is_priority is True


@pytest.mark.unit
def test_get_curriculum_honours_configured_path(tmp_path, monkeypatch):
    path = tmp_path / "curriculum.json"
    path.write_text(json.dumps(_payload()))
    monkeypatch.setenv("CURRICULUM_PATH", str(path))
    get_settings.cache_clear()
    get_curriculum.cache_clear()

    try:
        assert get_curriculum().phase_names == ["Foundation", "Power"]
    finally:
        monkeypatch.delenv("CURRICULUM_PATH")
        get_settings.cache_clear()
        get_curriculum.cache_clear()

    assert curriculum_module.get_curriculum() is DEFAULT_CURRICULUM
