"""HackShield API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map HackShieldError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - SQLite URLs get their tables created at startup (local runs without alembic);
      PostgreSQL is migrated with alembic
    - Previews, deployments and uploads are plain directories served by StaticFiles,
      mounted after the API routes so /api/v1/* takes precedence
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from hackshield.api.error_handlers import register_error_handlers
from hackshield.api.routes import (
    auth, hackathons, health, ide_access, ide_monitoring, ide_workspace, matching,
    notifications, registration, teams, users,
)
from hackshield.config import get_settings
from hackshield.infrastructure.database import init_db
from hackshield.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_url.startswith("sqlite"):
        await manager.create_all()
    logger.info("HackShield API started")
    yield
    await manager.engine.dispose()
    logger.info("HackShield API shutting down")


app = FastAPI(title="HackShield API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes — explicit registration. Fixed paths (/hackathons/violations) come
# before routers with /{hackathon_id} patterns.
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(ide_monitoring.router)
app.include_router(hackathons.router)
app.include_router(registration.router)
app.include_router(teams.router)
app.include_router(teams.hackathon_router)
app.include_router(matching.router)
app.include_router(ide_access.router)
app.include_router(ide_workspace.router)
app.include_router(ide_workspace.ai_router)
app.include_router(notifications.router)
app.include_router(notifications.hackathon_router)

for mount, directory in (
    ("/previews", settings.preview_root),
    ("/deployments", settings.deployment_root),
    ("/uploads", settings.upload_root),
):
    Path(directory).mkdir(parents=True, exist_ok=True)
    app.mount(mount, StaticFiles(directory=directory, html=True), name=mount.strip("/"))
