"""
Redis cache client with connection pooling and JSON serialization.

Every operation degrades to a miss/no-op when Redis is unreachable; callers
recompute instead of failing.
"""
import json
from typing import Optional, Any
import redis
from redis.connection import ConnectionPool
from app.core.config import settings
from app.core.logging import logger


class RedisCache:
    """Redis cache client with connection pooling."""

    def __init__(self, url: str = None):
        self._url = url or settings.REDIS_URL
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._pool = redis.ConnectionPool.from_url(
                self._url,
                decode_responses=True,
                max_connections=20,
                socket_connect_timeout=1,
                socket_timeout=1,
            )
            self._client = redis.Redis(connection_pool=self._pool)
            logger.info("Redis connection pool created")
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache by key.

        Returns:
            Cached value or None if not found
        """
        try:
            value = self._get_client().get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, expire: int = 300) -> bool:
        """
        Set value in cache with expiration (seconds). Value is JSON serialized.
        """
        try:
            self._get_client().setex(key, expire, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.error(f"Redis SET error for key {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching pattern (e.g. ``stats:*``).

        Returns:
            Number of keys deleted
        """
        try:
            client = self._get_client()
            keys = list(client.scan_iter(match=pattern))
            if keys:
                return client.delete(*keys)
            return 0
        except Exception as e:
            logger.error(f"Redis DELETE_PATTERN error for pattern {pattern}: {e}")
            return 0

    async def exists(self, key: str) -> bool:
        try:
            return self._get_client().exists(key) > 0
        except Exception as e:
            logger.error(f"Redis EXISTS error for key {key}: {e}")
            return False

    def close(self):
        if self._client:
            self._client.close()
            logger.info("Redis connection pool closed")


# Create a single instance to be imported throughout the app
cache = RedisCache()
