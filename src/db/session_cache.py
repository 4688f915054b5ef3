"""
Redis-backed cache of recently authenticated callers.
"""
import logging

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class SessionCache:
    """
    Remembers authenticated callers for a fixed TTL.

    A caller's identity (email) is the cache key; the value is empty.
    """

    def __init__(self, redis_client: aioredis.Redis, ttl_seconds: int = 3600) -> None:
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, redis_url: str, ttl_seconds: int = 3600) -> "SessionCache":
        """Create a cache connected to ``redis_url``."""
        return cls(aioredis.from_url(redis_url), ttl_seconds=ttl_seconds)

    async def exists(self, identity: str) -> bool:
        """Check whether ``identity`` holds a live session."""
        return bool(await self.redis.exists(identity))

    async def remember(self, identity: str) -> None:
        """Start a session for ``identity`` that expires after the TTL."""
        await self.redis.setex(identity, self.ttl_seconds, "")
        logger.debug(f"Cached session for {identity} ({self.ttl_seconds}s)")

    async def check_connection(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error(f"Redis connection check failed: {e}")
            return False

    async def close(self) -> None:
        await self.redis.aclose()
