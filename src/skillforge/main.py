"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from skillforge.config import get_settings
from skillforge.database import close_db, init_db
from skillforge.gamification.router import router as gamification_router
from skillforge.health.router import router as health_router
from skillforge.middleware import setup_middleware
from skillforge.practice.router import router as practice_router
from skillforge.progress.router import router as progress_router
from skillforge.redis_client import close_redis, init_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)

    # Redis only hardens set creation; run without it if unreachable
    try:
        await init_redis(settings.redis_url)
    except Exception:
        logger.warning("Redis unavailable, continuing without generation locks", exc_info=True)

    yield

    resolver = getattr(app.state, "resolver", None)
    if resolver is not None:
        await resolver.drain()

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="SkillForge API",
        description="Daily practice sets and skill progression for algebra learners",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(progress_router)
    app.include_router(practice_router)
    app.include_router(gamification_router)

    return app


app = create_app()
