"""Training Service schemas package."""

from services.training_service.schemas.curriculum import (  # noqa: F401
    CurriculumResponse,
    DrillResponse,
    PhaseResponse,
)
from services.training_service.schemas.progress import (  # noqa: F401
    AdvanceRequest,
    AdvancementResponse,
    DashboardResponse,
    DrillCompletionRequest,
    DrillCompletionResponse,
    PhaseStatusResponse,
    ProgressResponse,
    WeeklyDrillResponse,
)
