"""
Questlog FastAPI Application Entry Point.

Run with: uvicorn questlog.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from questlog.api.deps import RateLimited
from questlog.api.routes import (
    auth,
    data,
    goals,
    kv_sessions,
    pips,
    sessions,
    settings as settings_routes,
    subjects,
    templates,
)
from questlog.config import get_settings
from questlog.db.base import Base
from questlog.db.session import engine

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup: a local SQLite file gets its tables created; Postgres uses Alembic
    if settings.database_is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started (%s)", settings.app_name, settings.app_version, settings.environment)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Study quest tracker: subjects, sessions, streaks and achievements",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers (all rate limited)
for module in (
    auth,
    subjects,
    sessions,
    goals,
    pips,
    templates,
    settings_routes,
    data,
    kv_sessions,
):
    app.include_router(module.router, dependencies=[RateLimited])


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}
