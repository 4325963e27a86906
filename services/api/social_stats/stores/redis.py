"""Redis store for the stats cache and the token store.

Handles:
- Caching with TTL policies
- Token records (one value per provider, last write wins)

TTL policies:
- Platform stats payloads: ~60 seconds
- Provider tokens: ~60 days, renewed on every refresh
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from social_stats.settings import get_settings

# TTL constants (in seconds)
TTL_STATS_CACHE = 60  # 1 minute
TTL_TOKEN = 60 * 24 * 60 * 60  # 60 days

# Key prefixes
PREFIX_STATS = "stats_"
PREFIX_TOKEN = "token:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_get_json(key: str) -> dict[str, Any] | None:
    """Get JSON value from cache.

    Args:
        key: Cache key.

    Returns:
        Parsed JSON dict or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Set JSON value in cache.

    Args:
        key: Cache key.
        value: Dict to cache as JSON.
        ttl: Time-to-live in seconds.
    """
    await cache_set(key, json.dumps(value), ttl)


# ============================================================
# Platform stats cache
# ============================================================


async def get_stats_cache(platform: str) -> dict[str, Any] | None:
    """Get cached stats payload for a platform (key: stats_<platform>)."""
    return await cache_get_json(f"{PREFIX_STATS}{platform}")


async def set_stats_cache(platform: str, payload: dict[str, Any], ttl: int = TTL_STATS_CACHE) -> None:
    """Cache stats payload for a platform."""
    await cache_set_json(f"{PREFIX_STATS}{platform}", payload, ttl)


# ============================================================
# Token store
# ============================================================


async def get_token_record(provider: str) -> dict[str, Any] | None:
    """Get the stored token record for a provider.

    Args:
        provider: Provider name (e.g., "instagram").

    Returns:
        Record dict ({"value": str, "updatedAt": int}) or None if absent.
    """
    return await cache_get_json(f"{PREFIX_TOKEN}{provider}")


async def set_token_record(provider: str, record: dict[str, Any], ttl: int = TTL_TOKEN) -> None:
    """Store the token record for a provider, replacing any previous one.

    Args:
        provider: Provider name.
        record: Record dict to store as JSON.
        ttl: Time-to-live in seconds (rolling, reset on every write).
    """
    await cache_set_json(f"{PREFIX_TOKEN}{provider}", record, ttl)
