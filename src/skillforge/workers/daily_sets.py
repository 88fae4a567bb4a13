"""arq jobs for pre-generating daily sets.

Runs as a separate process ahead of the learners' morning so the first
request of the day finds its set ready.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

import redis.asyncio as aioredis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillforge.config import Settings, get_settings
from skillforge.database import close_db, get_session_factory, init_db
from skillforge.db.models import UserProfile
from skillforge.dependencies import build_content_resolver, build_daily_set_service
from skillforge.practice.resolver import ContentResolver
from skillforge.topics.catalog import get_topic_graph

logger = logging.getLogger(__name__)


async def startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize database, Redis and the content resolver on worker startup."""
    settings = get_settings()
    await init_db(settings.database_url)
    ctx["redis"] = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )
    ctx["settings"] = settings
    ctx["resolver"] = build_content_resolver(settings, get_topic_graph())
    logger.info("Daily set worker started")


async def shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Clean up on worker shutdown."""
    resolver: ContentResolver | None = ctx.get("resolver")
    if resolver:
        await resolver.drain()

    redis_client: aioredis.Redis | None = ctx.get("redis")
    if redis_client:
        await redis_client.aclose()

    await close_db()
    logger.info("Daily set worker shut down")


async def generate_daily_sets(ctx: dict) -> dict[str, int]:  # type: ignore[type-arg]
    """Cron entry point: create today's set for every learner."""
    return await pregenerate_daily_sets(
        get_session_factory(),
        ctx.get("redis"),
        ctx["settings"],
        ctx["resolver"],
    )


async def pregenerate_daily_sets(
    session_factory: async_sessionmaker[AsyncSession],
    redis: object | None,
    settings: Settings,
    resolver: ContentResolver,
    now: datetime | None = None,
) -> dict[str, int]:
    """Generate today's set for every profile, a batch at a time.

    Users who already have a set are skipped. A failure for one user is
    logged and counted, never fatal for the run.
    """
    async with session_factory() as db:
        result = await db.execute(select(UserProfile.user_id).order_by(UserProfile.user_id))
        user_ids = list(result.scalars())

    counts = {"created": 0, "skipped": 0, "failed": 0}
    batch_size = max(settings.daily_set_batch_size, 1)

    async def generate_for(user_id: str) -> str:
        async with session_factory() as db:
            svc = build_daily_set_service(db, redis, settings, get_topic_graph(), resolver)
            if await svc.get_today(user_id, now) is not None:
                return "skipped"
            await svc.get_or_create(user_id, now=now)
            return "created"

    for start in range(0, len(user_ids), batch_size):
        batch = user_ids[start:start + batch_size]
        outcomes = await asyncio.gather(*(generate_for(uid) for uid in batch), return_exceptions=True)
        for user_id, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Daily set pre-generation failed for %s", user_id, exc_info=outcome)
                counts["failed"] += 1
            else:
                counts[outcome] += 1

    logger.info(
        "Daily set pre-generation finished: %d created, %d skipped, %d failed",
        counts["created"], counts["skipped"], counts["failed"],
    )
    return counts
