"""Redis caching for read-mostly reference data (the crate type catalog).

Cache keys: {prefix}:{function_name}:{args_hash}.  Any Redis failure
falls back to calling the wrapped function directly.
"""

import functools
import hashlib
import json
import logging
from datetime import date, datetime
from typing import Callable, Optional

import redis.asyncio as redis

from flockpak.config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(*args, **kwargs) -> str:
    """Deterministic hash of the call arguments."""
    if not args and not kwargs:
        return "default"

    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True)
    return hashlib.md5(key_data.encode()).hexdigest()


def _serialize(result):
    if hasattr(result, "model_dump"):
        return result.model_dump(mode="json")
    if isinstance(result, list) and result and hasattr(result[0], "model_dump"):
        return [item.model_dump(mode="json") for item in result]
    return result


def cached(ttl: int = 300, prefix: str = "cache"):
    """Cache an async route's JSON-serializable result in Redis.

    Only simple keyword arguments take part in the key; injected
    dependencies (sessions, etc.) are skipped.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.cache_enabled:
                return await func(*args, **kwargs)

            key_kwargs = {}
            for k, v in kwargs.items():
                if k.startswith("_"):
                    continue
                if isinstance(v, (int, str, bool, float, type(None))):
                    key_kwargs[k] = v
                elif isinstance(v, (date, datetime)):
                    key_kwargs[k] = v.isoformat()
            key = f"{prefix}:{func.__name__}:{cache_key(**key_kwargs)}"

            try:
                client = await get_redis()
                hit = await client.get(key)
                if hit:
                    logger.debug(f"Cache HIT: {key}")
                    return json.loads(hit)

                logger.debug(f"Cache MISS: {key}")
                result = await func(*args, **kwargs)
                await client.setex(key, ttl, json.dumps(_serialize(result)))
                return result

            except redis.RedisError as e:
                logger.warning(f"Redis error (falling back to uncached): {e}")
                return await func(*args, **kwargs)

        return wrapper

    return decorator


async def invalidate_cache(pattern: str):
    """Delete every key matching ``pattern`` (e.g. ``"crate_types:*"``)."""
    if not settings.cache_enabled:
        return
    try:
        client = await get_redis()
        keys = [key async for key in client.scan_iter(match=pattern)]
        if keys:
            await client.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching {pattern}")
    except redis.RedisError as e:
        logger.warning(f"Failed to invalidate cache: {e}")
