"""FastAPI application for the Training Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import configure_logging
from libs.common.middleware import add_observability_middleware
from services.training_service.routers.member import router as training_router


def create_app() -> FastAPI:
    """Create and configure the Training Service FastAPI app."""
    configure_logging()
    app = FastAPI(
        title="ProPath Training Service",
        version="0.1.0",
        description="Phase/week training progression and drill tracking.",
    )
    add_observability_middleware(app, "training")
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "training"}

    app.include_router(training_router)

    return app


app = create_app()
