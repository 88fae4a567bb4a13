"""Redis client for generation locks and level-up events.

Redis is optional: without it the service still works, relying on the
database's unique constraints alone.
"""

import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


async def init_redis(url: str | None) -> None:
    """Connect and ping. An empty URL leaves Redis disabled.

    Raises the connection error if the server is unreachable; the client
    is not kept in that case.
    """
    global _client  # noqa: PLW0603
    if not url:
        logger.info("Redis disabled")
        return
    client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )
    try:
        await client.ping()
    except Exception:
        await client.aclose()
        raise
    _client = client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis_optional() -> redis.Redis | None:
    return _client
