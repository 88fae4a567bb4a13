"""Shared test fixtures."""

from __future__ import annotations

import os
import random
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

os.environ["SKF_JWT_SECRET"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["SKF_LOG_FORMAT"] = "console"

from skillforge.config import get_settings  # noqa: E402
from skillforge.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from skillforge.db.base import Base  # noqa: E402
from skillforge.db import models  # noqa: E402,F401
from skillforge.dependencies import get_content_resolver, get_redis_dep  # noqa: E402
from skillforge.gamification.rewards import RewardLedger  # noqa: E402
from skillforge.practice.composer import SetComposer  # noqa: E402
from skillforge.practice.daily_set_service import DailySetService  # noqa: E402
from skillforge.practice.resolver import ContentResolver  # noqa: E402
from skillforge.practice.topic_practice_service import TopicPracticeService  # noqa: E402
from skillforge.topics.catalog import get_topic_graph  # noqa: E402
from skillforge.topics.graph import TopicGraph  # noqa: E402
from tests.helpers import make_token  # noqa: E402

get_settings.cache_clear()


async def _no_sleep(_seconds: float) -> None:
    return None


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[None, None]:
    """Fresh SQLite database per test with all tables created."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'skillforge.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def graph() -> TopicGraph:
    return get_topic_graph()


@pytest.fixture
def ledger() -> RewardLedger:
    return RewardLedger()


@pytest.fixture
def placeholder_resolver(graph, ledger) -> ContentResolver:
    """Resolver with no generator and no bank: every problem is a placeholder."""
    return ContentResolver(graph, ledger, sleep=_no_sleep)


@pytest.fixture
def make_daily_service(db_session, graph, ledger, placeholder_resolver) -> Callable[..., DailySetService]:
    def factory(**overrides: object) -> DailySetService:
        options: dict = {
            "graph": graph,
            "composer": SetComposer(graph, rng=random.Random(7)),
            "resolver": placeholder_resolver,
            "ledger": ledger,
            "lock_wait_seconds": 1.0,
        }
        options.update(overrides)
        db = options.pop("db", db_session)
        redis = options.pop("redis", None)
        return DailySetService(db, redis, **options)

    return factory


@pytest.fixture
def make_practice_service(db_session, graph, ledger, placeholder_resolver) -> Callable[..., TopicPracticeService]:
    def factory(**overrides: object) -> TopicPracticeService:
        options: dict = {
            "graph": graph,
            "composer": SetComposer(graph, rng=random.Random(7)),
            "resolver": placeholder_resolver,
            "ledger": ledger,
        }
        options.update(overrides)
        db = options.pop("db", db_session)
        redis = options.pop("redis", None)
        return TopicPracticeService(db, redis, **options)

    return factory


@pytest_asyncio.fixture
async def client(db_engine, placeholder_resolver) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, running on SQLite without Redis."""
    from skillforge.main import create_app

    app = create_app()

    async def no_redis() -> AsyncGenerator[None, None]:
        yield None

    app.dependency_overrides[get_redis_dep] = no_redis
    app.dependency_overrides[get_content_resolver] = lambda: placeholder_resolver

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient) -> AsyncClient:
    client.headers["Authorization"] = f"Bearer {make_token('learner-1')}"
    return client
