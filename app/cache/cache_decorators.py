"""
Cache decorators for easy function result caching.
"""
import hashlib
import json
from functools import wraps
from typing import Callable, Any
from sqlalchemy.ext.asyncio import AsyncSession
from app.cache.redis_client import cache
from app.core.logging import logger

STATS_PREFIX = "stats"


def cached(key_prefix: str, expire: int = 300):
    """
    Decorator to cache async function results with configurable TTL.

    Args:
        key_prefix: Prefix for the cache key
        expire: Expiration time in seconds (default: 300 = 5 minutes)

    Usage:
        @cached('stats:dashboard', expire=60)
        async def dashboard_stats(self):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            cache_key = f"{key_prefix}:{_generate_key_from_args(args, kwargs)}"

            cached_value = await cache.get(cache_key)
            if cached_value is not None:
                logger.debug(f"Cache hit for key: {cache_key}")
                return cached_value

            logger.debug(f"Cache miss for key: {cache_key}")
            result = await func(*args, **kwargs)
            await cache.set(cache_key, result, expire)
            return result
        return wrapper
    return decorator


async def invalidate_stats() -> None:
    """Drop every cached statistics result after a write that changes them."""
    await cache.delete_pattern(f"{STATS_PREFIX}:*")


def _generate_key_from_args(args: tuple, kwargs: dict) -> str:
    """
    Build an MD5 key from the call arguments, skipping sessions and the
    service instance a method is bound to.
    """
    filtered_args = [
        arg for arg in args
        if not isinstance(arg, AsyncSession) and not hasattr(arg, "session")
    ]

    key_data = {
        'args': [str(arg) for arg in filtered_args],
        'kwargs': {k: str(v) for k, v in kwargs.items()}
    }
    key_string = json.dumps(key_data, sort_keys=True)
    return hashlib.md5(key_string.encode()).hexdigest()
