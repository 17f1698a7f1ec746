"""Member-facing training progress endpoints."""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.training_service.curriculum import CurriculumDefinition, get_curriculum
from services.training_service.schemas import (
    AdvanceRequest,
    CurriculumResponse,
    DashboardResponse,
    DrillCompletionRequest,
    DrillCompletionResponse,
)
from services.training_service.services.progress_ops import (
    advance_member_progress,
    get_dashboard,
    set_drill_completion,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/training", tags=["training"])


@router.get("/curriculum", response_model=CurriculumResponse)
async def read_curriculum(
    curriculum: CurriculumDefinition = Depends(get_curriculum),
):
    return CurriculumResponse.model_validate(curriculum)


@router.get("/progress/me", response_model=DashboardResponse)
async def read_my_progress(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    curriculum: CurriculumDefinition = Depends(get_curriculum),
):
    """Phase statuses, advancement status and this week's drills."""
    return await get_dashboard(
        db, user_id=current_user.user_id, curriculum=curriculum
    )


@router.put("/drills/{drill_id}/completion", response_model=DrillCompletionResponse)
async def complete_drill(
    drill_id: str,
    body: Optional[DrillCompletionRequest] = Body(default=None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    curriculum: CurriculumDefinition = Depends(get_curriculum),
):
    completed = await set_drill_completion(
        db,
        user_id=current_user.user_id,
        drill_id=drill_id,
        completed=True,
        curriculum=curriculum,
        notes=body.notes if body else None,
    )
    return DrillCompletionResponse(drill_id=drill_id, completed=completed)


@router.delete("/drills/{drill_id}/completion", response_model=DrillCompletionResponse)
async def uncomplete_drill(
    drill_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    curriculum: CurriculumDefinition = Depends(get_curriculum),
):
    completed = await set_drill_completion(
        db,
        user_id=current_user.user_id,
        drill_id=drill_id,
        completed=False,
        curriculum=curriculum,
    )
    return DrillCompletionResponse(drill_id=drill_id, completed=completed)


@router.post("/progress/advance", response_model=DashboardResponse)
async def advance_my_progress(
    body: Optional[AdvanceRequest] = Body(default=None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    curriculum: CurriculumDefinition = Depends(get_curriculum),
):
    """Move to the next week or phase once this week's priority drills are done."""
    await advance_member_progress(
        db,
        user_id=current_user.user_id,
        curriculum=curriculum,
        expected_version=body.expected_version if body else None,
    )
    return await get_dashboard(
        db, user_id=current_user.user_id, curriculum=curriculum
    )
