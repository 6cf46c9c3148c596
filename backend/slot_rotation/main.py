"""Slot Rotation API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Session manager created in the lifespan and stored on app.state
    - The in-process scheduler runs only when rotation_scheduler_enabled is set
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slot_rotation.api.error_handlers import register_error_handlers
from slot_rotation.api.routes import health, rotation
from slot_rotation.config import get_settings
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.infrastructure.observability import setup_logging
from slot_rotation.services.rotation_factory import build_clock, build_orchestrator
from slot_rotation.services.rotation_scheduler import RotationScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.db_manager = db

    scheduler = None
    if settings.rotation_scheduler_enabled:
        scheduler = RotationScheduler(
            lambda: build_orchestrator(db, settings),
            build_clock(settings),
            jitter_seconds=settings.rotation_scheduler_jitter_seconds,
        )
        scheduler.start()
    logger.info("Slot rotation API started")
    yield
    if scheduler is not None:
        await scheduler.stop()
    await db.close()
    app.state.db_manager = None
    logger.info("Slot rotation API shutting down")


app = FastAPI(
    title="Slot Rotation API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(rotation.router)

register_error_handlers(app)
