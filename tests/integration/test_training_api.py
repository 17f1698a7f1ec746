"""Integration tests for training_service member endpoints."""

import pytest
from services.training_service.curriculum import DEFAULT_CURRICULUM
from tests.conftest import make_member_user, override_auth

FIRST_PHASE = "Phase 1: Foundation"
# Week 1 priority drill of the built-in curriculum
PRIORITY_DRILL = "foundation-w1-stance-balance"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(training_client):
    response = await training_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "training"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_read_curriculum(training_client):
    """GET /training/curriculum: phases in order with their drills."""
    response = await training_client.get("/training/curriculum")

    assert response.status_code == 200
    data = response.json()
    assert [p["name"] for p in data["phases"]] == DEFAULT_CURRICULUM.phase_names
    assert data["weeks_per_phase"] == 3
    assert len(data["drills"]) == len(DEFAULT_CURRICULUM.drills)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_new_member_dashboard(training_client):
    """GET /training/progress/me: first visit starts the member at week 1."""
    response = await training_client.get("/training/progress/me")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["progress"]["current_phase"] == FIRST_PHASE
    assert data["progress"]["current_week"] == 1
    assert data["phases"][0]["status"] == "current"
    assert {p["status"] for p in data["phases"][1:]} == {"locked"}
    assert data["advancement"]["can_advance"] is False
    assert data["advancement"]["blocked_reason"] == (
        "Complete all priority drills to advance"
    )
    priority = [d["id"] for d in data["drills"] if d["is_priority"]]
    assert priority == [PRIORITY_DRILL]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_complete_and_uncomplete_drill(training_client):
    response = await training_client.put(
        f"/training/drills/{PRIORITY_DRILL}/completion", json={"notes": "felt good"}
    )
    assert response.status_code == 200
    assert response.json() == {"drill_id": PRIORITY_DRILL, "completed": True}

    dashboard = (await training_client.get("/training/progress/me")).json()
    assert dashboard["advancement"]["can_advance"] is True
    assert dashboard["advancement"]["weekly_progress"] == 33

    response = await training_client.delete(
        f"/training/drills/{PRIORITY_DRILL}/completion"
    )
    assert response.status_code == 200
    assert response.json()["completed"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_complete_unknown_drill(training_client):
    response = await training_client.put("/training/drills/not-a-drill/completion")

    assert response.status_code == 404
    assert response.json()["code"] == "drill_not_found"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_advance_blocked_without_priority_drills(training_client):
    """POST /training/progress/advance: 409 until priority drills are done."""
    response = await training_client.post("/training/progress/advance")

    assert response.status_code == 409
    assert response.json()["code"] == "advance_not_allowed"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_advance_to_next_week(training_client):
    await training_client.put(f"/training/drills/{PRIORITY_DRILL}/completion")

    response = await training_client.post(
        "/training/progress/advance", json={"expectedVersion": 1}
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["progress"]["current_week"] == 2
    assert data["progress"]["version"] == 2
    assert all(d["id"].startswith("foundation-w2-") for d in data["drills"])


@pytest.mark.asyncio
@pytest.mark.integration
async def test_advance_with_stale_version(training_client):
    await training_client.put(f"/training/drills/{PRIORITY_DRILL}/completion")

    response = await training_client.post(
        "/training/progress/advance", json={"expectedVersion": 5}
    )

    assert response.status_code == 409
    assert response.json()["code"] == "progress_conflict"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_progress_is_per_member(training_client):
    await training_client.put(f"/training/drills/{PRIORITY_DRILL}/completion")

    from services.training_service.app.main import app

    with override_auth(app, make_member_user()):
        response = await training_client.get("/training/progress/me")

    assert response.status_code == 200
    assert response.json()["advancement"]["can_advance"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_progress_requires_auth(training_client):
    from libs.auth.dependencies import get_current_user
    from services.training_service.app.main import app

    app.dependency_overrides.pop(get_current_user, None)

    response = await training_client.get("/training/progress/me")

    assert response.status_code == 401
