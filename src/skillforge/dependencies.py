"""Shared FastAPI dependencies and service wiring."""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from skillforge.ai.content_generator import ContentGenerator, HttpContentGenerator
from skillforge.ai.image_analyzer import HttpImageAnalyzer, ImageAnalyzer
from skillforge.config import Settings, get_settings
from skillforge.database import get_session, get_session_factory
from skillforge.exercises.bank import SqlExerciseBank
from skillforge.gamification.rewards import RewardLedger, RewardPolicy
from skillforge.practice.composer import SetComposer
from skillforge.practice.daily_set_service import DailySetService
from skillforge.practice.resolver import ContentResolver
from skillforge.practice.topic_practice_service import TopicPracticeService
from skillforge.progress.mastery import MasteryPolicy
from skillforge.progress.tracker import SkillProgressTracker
from skillforge.redis_client import get_redis_optional
from skillforge.topics.catalog import get_topic_graph
from skillforge.topics.graph import TopicGraph

get_db = get_session


async def get_redis_dep() -> AsyncGenerator[object | None, None]:
    """Yield the Redis client, or None when Redis is not configured."""
    yield get_redis_optional()


def get_graph() -> TopicGraph:
    return get_topic_graph()


def get_reward_ledger(settings: Settings = Depends(get_settings)) -> RewardLedger:
    return RewardLedger(RewardPolicy.from_settings(settings))


def get_mastery_policy(settings: Settings = Depends(get_settings)) -> MasteryPolicy:
    return MasteryPolicy.from_settings(settings)


def build_content_generator(settings: Settings) -> ContentGenerator | None:
    if not settings.generator_url:
        return None
    return HttpContentGenerator(settings.generator_url, settings.ai_api_key, settings.ai_timeout_seconds)


def build_image_analyzer(settings: Settings) -> ImageAnalyzer | None:
    if not settings.image_analyzer_url:
        return None
    return HttpImageAnalyzer(settings.image_analyzer_url, settings.ai_api_key, settings.ai_timeout_seconds)


def build_content_resolver(settings: Settings, graph: TopicGraph) -> ContentResolver:
    return ContentResolver(
        graph,
        RewardLedger(RewardPolicy.from_settings(settings)),
        generator=build_content_generator(settings),
        bank=SqlExerciseBank(get_session_factory()),
        retries=settings.generation_retries,
        backoff_base=settings.generation_backoff_base_seconds,
    )


def build_composer(settings: Settings, graph: TopicGraph, rng: random.Random | None = None) -> SetComposer:
    return SetComposer(
        graph,
        rng=rng,
        review_threshold=settings.review_mastery_threshold,
        foundational_branch_id=settings.foundational_branch_id,
    )


def get_content_resolver(
    request: Request,
    settings: Settings = Depends(get_settings),
    graph: TopicGraph = Depends(get_graph),
) -> ContentResolver:
    """Process-wide resolver, kept on app state so background work can be drained at shutdown."""
    resolver = getattr(request.app.state, "resolver", None)
    if resolver is None:
        resolver = build_content_resolver(settings, graph)
        request.app.state.resolver = resolver
    return resolver


def get_image_analyzer(settings: Settings = Depends(get_settings)) -> ImageAnalyzer | None:
    return build_image_analyzer(settings)


def get_tracker(
    db: AsyncSession = Depends(get_db),
    graph: TopicGraph = Depends(get_graph),
    policy: MasteryPolicy = Depends(get_mastery_policy),
    settings: Settings = Depends(get_settings),
) -> SkillProgressTracker:
    return SkillProgressTracker(db, graph, policy, settings.default_timezone)


def build_daily_set_service(
    db: AsyncSession,
    redis: object | None,
    settings: Settings,
    graph: TopicGraph,
    resolver: ContentResolver,
    analyzer: ImageAnalyzer | None = None,
) -> DailySetService:
    return DailySetService(
        db,
        redis,
        graph=graph,
        composer=build_composer(settings, graph),
        resolver=resolver,
        ledger=RewardLedger(RewardPolicy.from_settings(settings)),
        analyzer=analyzer,
        mastery_policy=MasteryPolicy.from_settings(settings),
        default_timezone=settings.default_timezone,
        stuck_threshold=settings.stuck_threshold,
        lock_ttl_seconds=settings.generation_lock_ttl_seconds,
        lock_wait_seconds=settings.generation_lock_wait_seconds,
        default_problems_per_day=settings.default_problems_per_day,
    )


def get_daily_set_service(
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
    settings: Settings = Depends(get_settings),
    graph: TopicGraph = Depends(get_graph),
    resolver: ContentResolver = Depends(get_content_resolver),
    analyzer: ImageAnalyzer | None = Depends(get_image_analyzer),
) -> DailySetService:
    return build_daily_set_service(db, redis, settings, graph, resolver, analyzer)


def get_topic_practice_service(
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
    settings: Settings = Depends(get_settings),
    graph: TopicGraph = Depends(get_graph),
    resolver: ContentResolver = Depends(get_content_resolver),
    analyzer: ImageAnalyzer | None = Depends(get_image_analyzer),
) -> TopicPracticeService:
    return TopicPracticeService(
        db,
        redis,
        graph=graph,
        composer=build_composer(settings, graph),
        resolver=resolver,
        ledger=RewardLedger(RewardPolicy.from_settings(settings)),
        analyzer=analyzer,
        mastery_policy=MasteryPolicy.from_settings(settings),
        default_timezone=settings.default_timezone,
        stuck_threshold=settings.stuck_threshold,
        session_size=settings.topic_practice_size,
    )
