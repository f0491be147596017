# daily_pulse/main.py

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import OperationalError

from daily_pulse.config import get_settings
from daily_pulse.database import init_db
from daily_pulse.logging_config import configure_logging
from daily_pulse.routers import cleanup_router, newsletter_router
from daily_pulse.services.generation_jobs import GenerationJobRegistry
from daily_pulse.services.newsletter_service import build_newsletter_service
from daily_pulse.services.scheduler import (
    SchedulerState,
    start_cleanup_scheduler,
    stop_cleanup_scheduler,
)
from daily_pulse.storage import get_audio_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and storage, start the cleanup scheduler; stop it on shutdown."""
    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)

    # Fail at startup rather than on every generate request
    missing = settings.missing_provider_keys()
    if missing:
        logger.error(f"Startup failed: missing {', '.join(missing)}")
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    init_db()
    get_audio_store().ensure_storage_root()

    if settings.CLEANUP_SCHEDULER_ENABLED:
        try:
            start_cleanup_scheduler(app.state.cleanup_scheduler)
        except Exception as e:
            # The API still serves without the daily cleanup
            logger.error(f"Failed to start cleanup scheduler: {e}")

    logger.info(f"Daily Pulse API started ({settings.ENVIRONMENT})")

    yield

    stop_cleanup_scheduler(app.state.cleanup_scheduler)
    await app.state.generation_jobs.shutdown()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Daily Pulse API",
        description="Daily market newsletter generation with audio narration",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.generation_jobs = GenerationJobRegistry(
        service_factory=build_newsletter_service,
        reject_concurrent=settings.REJECT_CONCURRENT_GENERATION,
    )
    app.state.cleanup_scheduler = SchedulerState()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(newsletter_router)
    app.include_router(cleanup_router)

    # Audio files, named by publish date
    app.mount(
        "/audio",
        StaticFiles(directory=settings.AUDIO_STORAGE_PATH, check_dir=False),
        name="audio",
    )

    @app.exception_handler(OperationalError)
    async def database_unavailable(request: Request, exc: OperationalError) -> JSONResponse:
        logger.error(f"Database unavailable on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Service Unavailable"})

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @app.get("/")
    def root() -> dict:
        return {
            "name": "Daily Pulse API",
            "version": app.version,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "newsletter": {
                    "generate": "POST /newsletter/generate",
                    "latest": "GET /newsletter/latest",
                    "history": "GET /newsletter/history",
                    "jobs": "GET /newsletter/jobs",
                    "by_date": "GET /newsletter/{date}",
                    "delete": "DELETE /newsletter/{id}",
                },
                "cleanup": {
                    "run": "POST /cleanup/run",
                    "stats": "GET /cleanup/stats",
                    "scheduler": "GET /cleanup/scheduler",
                },
                "audio": "GET /audio/{file}",
            },
        }

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "ok",
            "service": "daily-pulse-api",
            "timestamp": datetime.now(UTC).isoformat(),
            "environment": settings.ENVIRONMENT,
        }

    return app


app = create_app()
