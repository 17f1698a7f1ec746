"""FastAPI application for the Bookings Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import configure_logging
from libs.common.middleware import add_observability_middleware
from services.bookings_service.routers.admin import router as admin_router
from services.bookings_service.routers.member import router as bookings_router


def create_app() -> FastAPI:
    """Create and configure the Bookings Service FastAPI app."""
    configure_logging()
    app = FastAPI(
        title="ProPath Bookings Service",
        version="0.1.0",
        description="Coach session booking, packages and availability.",
    )
    add_observability_middleware(app, "bookings")
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "bookings"}

    app.include_router(bookings_router)
    app.include_router(admin_router)

    return app


app = create_app()
