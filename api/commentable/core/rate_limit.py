"""Fixed-window rate limiting on top of Redis."""

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

from fastapi import Depends

from commentable.core.exceptions import RateLimitExceededError
from commentable.core.logging import get_logger
from commentable.core.redis import get_redis


if TYPE_CHECKING:
    from redis.asyncio import Redis


logger = get_logger(__name__)


class RateLimiter:
    """Count actions per user in fixed windows.

    Without a Redis client every check passes.
    """

    def __init__(self, redis: "Redis | None" = None):
        self.redis = redis

    @staticmethod
    def key(scope: str, user_id: UUID, window_seconds: int) -> str:
        return f"ratelimit:{scope}:{user_id}:{window_seconds}"

    async def hit(
        self,
        scope: str,
        user_id: UUID,
        limit: int,
        window_seconds: int,
    ) -> int:
        """Record one action and raise when the window's limit is exceeded.

        Args:
            scope: Action family, e.g. ``comments``.
            user_id: Acting user.
            limit: Allowed actions per window; ``0`` disables the check.
            window_seconds: Window length.

        Returns:
            The number of actions counted in the current window.

        Raises:
            RateLimitExceededError: When the count goes above ``limit``.
        """
        if not self.redis or limit <= 0:
            return 0

        key = self.key(scope, user_id, window_seconds)
        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, window_seconds, nx=True)
        count, _ = await pipe.execute()

        if int(count) > limit:
            logger.warning(
                "rate_limit_exceeded",
                scope=scope,
                limit=limit,
                window_seconds=window_seconds,
            )
            msg = f"Too many {scope} requests, try again later"
            raise RateLimitExceededError(msg)

        return int(count)


def get_rate_limiter() -> RateLimiter:
    """FastAPI dependency: a limiter bound to the shared Redis client."""
    return RateLimiter(get_redis())


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]
