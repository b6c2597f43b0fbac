"""
Dayflow - Main Application Entry Point

Daily schedule service: tasks, routines and reminders for one day at a time.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dayflow.core.config import get_settings
from dayflow.core.logger import configure_logging, setup_logger

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info(f"Starting Dayflow in {settings.ENVIRONMENT} mode...")

    from dayflow.infrastructure.local.database import init_db

    await init_db()

    from dayflow.api.deps import get_reminder_service

    reminder_service = get_reminder_service()
    if settings.REMINDERS_ENABLED and not settings.is_test:
        reminder_service.start()

    yield

    # Shutdown
    logger.info("Shutting down Dayflow...")
    reminder_service.shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Dayflow",
        description="Daily schedule reconciliation for tasks and routines",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from dayflow.api import meal_preferences, schedule, tasks

    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
    app.include_router(schedule.router, prefix="/api", tags=["schedule"])
    app.include_router(meal_preferences.router, prefix="/api", tags=["meal_preferences"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": "0.1.0"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
