"""Platform stats with an optional read-through cache.

Cache: key stats_<platform>, TTL ~60 seconds (STATS_CACHE_TTL), only when
STATS_CACHE_ENABLED is set. Zero results from failed fetches are never
cached. If Redis is unavailable the service still works but skips caching.
"""

import logging

import httpx
from redis.exceptions import RedisError

from social_stats.schemas import StatsResult
from social_stats.services.platforms import (
    Platform,
    PlatformError,
    SocialStatsClient,
    empty_stats,
)
from social_stats.settings import Settings, get_settings
from social_stats.stores.redis import get_stats_cache, set_stats_cache

logger = logging.getLogger("uvicorn.error")


async def get_platform_stats(
    platform: Platform,
    *,
    client: SocialStatsClient | None = None,
    settings: Settings | None = None,
) -> StatsResult:
    """Get counters for a platform, from cache when enabled.

    Vendor failures are logged and degrade to zero counters.
    """
    settings = settings or get_settings()
    use_cache = settings.stats_cache_enabled

    if use_cache:
        cached = await _try_get_cached_stats(platform)
        if cached is not None:
            logger.info(f"Stats cache HIT for platform={platform.value}")
            return cached
        logger.info(f"Stats cache MISS for platform={platform.value}")

    owns_client = client is None
    client = client or SocialStatsClient(settings=settings)
    try:
        result = await client.fetch(platform)
    except (httpx.HTTPError, httpx.InvalidURL, PlatformError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Error fetching {platform.label} data: {e!r}")
        return empty_stats(platform)
    finally:
        if owns_client:
            await client.close()

    if use_cache:
        await _try_set_cached_stats(platform, result, ttl=settings.stats_cache_ttl)
    return result


async def _try_get_cached_stats(platform: Platform) -> StatsResult | None:
    try:
        payload = await get_stats_cache(platform.value)
    except (RuntimeError, RedisError, ValueError) as e:
        logger.warning(f"Redis stats cache read failed: {e}")
        return None
    if not payload:
        return None
    try:
        return StatsResult.model_validate(payload)
    except ValueError:
        return None


async def _try_set_cached_stats(platform: Platform, result: StatsResult, ttl: int) -> None:
    try:
        await set_stats_cache(platform.value, result.to_payload(), ttl=ttl)
    except (RuntimeError, RedisError) as e:
        logger.warning(f"Redis stats cache write failed: {e}")
