"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from jgp.auth.router import router as auth_router
from jgp.avatar.router import router as avatar_router
from jgp.children.router import router as children_router
from jgp.config import get_settings
from jgp.database import close_db, create_tables, get_session, init_db
from jgp.db.seed import seed_reference_data
from jgp.drills.router import router as drills_router
from jgp.health.router import router as health_router
from jgp.middleware import setup_middleware
from jgp.preferences.router import router as settings_router
from jgp.progress.router import router as progress_router
from jgp.redis_client import close_redis, init_redis
from jgp.sessions.router import router as sessions_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await create_tables()
    await init_redis(settings.redis_url)

    if settings.seed_on_startup:
        async for db in get_session():
            await seed_reference_data(db)
            break

    logger.info("app_started", version=settings.app_version, environment=settings.environment)
    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Junior Golf Playbook API",
        description="Backend API for Junior Golf Playbook — guided golf practice for kids",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(children_router)
    app.include_router(drills_router)
    app.include_router(sessions_router)
    app.include_router(progress_router)
    app.include_router(avatar_router)
    app.include_router(settings_router)

    return app


app = create_app()
