# ruff: noqa: PLW0603
"""Optional Redis client backing the per-user rate limits.

When Redis is disabled or unreachable the client stays ``None`` and the
rate limiter lets every request through.
"""

import redis.asyncio as redis

from commentable.config import get_settings
from commentable.core.logging import get_logger


logger = get_logger(__name__)

_client: redis.Redis | None = None


async def init_redis(url: str | None = None) -> redis.Redis | None:
    """Connect to Redis; returns None (and logs) when the server does not answer."""
    global _client

    settings = get_settings()
    url = url or settings.redis_url
    client = redis.from_url(
        url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_connect_timeout,
        retry_on_timeout=settings.redis_retry_on_timeout,
        health_check_interval=settings.redis_health_check_interval,
        decode_responses=True,
    )

    try:
        await client.ping()
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning(
            "redis_unavailable",
            error=str(e),
            message="Running without Redis - rate limits are not enforced",
        )
        await client.aclose()
        _client = None
        return None

    logger.info("redis_connected", url=url.split("@")[-1])
    _client = client
    return client


async def shutdown_redis() -> None:
    global _client

    if _client is not None:
        await _client.aclose()
        logger.info("redis_disconnected")
    _client = None


def get_redis() -> redis.Redis | None:
    return _client


async def redis_is_healthy() -> bool:
    """Ping the shared client; a missing client counts as unhealthy."""
    if _client is None:
        return False
    try:
        return bool(await _client.ping())
    except redis.RedisError as e:
        logger.warning("redis_ping_failed", error=str(e))
        return False
