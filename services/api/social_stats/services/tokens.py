"""Provider token store + long-lived token renewal (Instagram, Facebook).

Tokens live in Redis as one TokenRecord per provider with a ~60 day TTL.
Every successful refresh rewrites the record, so the TTL rolls forward.
When no record is stored (or Redis is unavailable) reads fall back to the
token configured in the environment.

Renewal:
- Instagram: ig_refresh_token on long-lived tokens only (prefix check)
- Facebook: fb_exchange_token, long-lived in -> new long-lived out

Both renewals run side by side; one failing doesn't stop the other.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Any

import httpx
from redis.exceptions import RedisError

from social_stats.settings import Settings, get_settings
from social_stats.stores.redis import get_token_record, set_token_record

logger = logging.getLogger("uvicorn.error")

PROVIDER_INSTAGRAM = "instagram"
PROVIDER_FACEBOOK = "facebook"
REFRESHABLE_PROVIDERS = (PROVIDER_INSTAGRAM, PROVIDER_FACEBOOK)

INSTAGRAM_REFRESH_URL = "https://graph.instagram.com/refresh_access_token"
FACEBOOK_EXCHANGE_URL = "https://graph.facebook.com/v22.0/oauth/access_token"


@dataclass(frozen=True)
class TokenRecord:
    value: str
    updated_at: int  # epoch milliseconds

    def to_payload(self) -> dict[str, Any]:
        return {"value": self.value, "updatedAt": self.updated_at}

    @classmethod
    def from_payload(cls, payload: Any) -> TokenRecord | None:
        if not isinstance(payload, dict) or not payload:
            return None
        value = payload.get("value")
        if not isinstance(value, str) or not value.strip():
            return None
        try:
            updated_at = int(payload.get("updatedAt") or 0)
        except (TypeError, ValueError):
            updated_at = 0
        return cls(value=value.strip(), updated_at=updated_at)


class TokenRefreshError(RuntimeError):
    pass


class RefreshOutcome(str, Enum):
    REFRESHED = "refreshed"
    SKIPPED = "skipped"
    FAILED = "failed"


async def load_token_record(provider: str) -> TokenRecord | None:
    """Read the stored record for a provider; None if absent or store unavailable."""
    try:
        payload = await get_token_record(provider)
    except (RuntimeError, RedisError, ValueError) as e:
        logger.warning(f"Token store read failed for {provider}: {e}")
        return None
    return TokenRecord.from_payload(payload)


async def get_token(provider: str, fallback: str | None = None) -> str:
    """Current token for a provider: stored value, else fallback, else ""."""
    record = await load_token_record(provider)
    if record is not None:
        return record.value
    return (fallback or "").strip()


async def set_token(
    provider: str,
    value: str | None,
    *,
    settings: Settings | None = None,
) -> TokenRecord | None:
    """Persist a new token for a provider. Empty values are ignored.

    Raises:
        RuntimeError: Redis not initialized.
        RedisError: Redis write failed.
    """
    if not value or not value.strip():
        return None
    settings = settings or get_settings()
    record = TokenRecord(value=value.strip(), updated_at=int(time.time() * 1000))
    await set_token_record(
        provider,
        record.to_payload(),
        ttl=settings.token_ttl_days * 24 * 60 * 60,
    )
    return record


async def refresh_instagram_token(
    *,
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> RefreshOutcome:
    """Extend the Instagram long-lived token (rolling 60 days).

    Short-lived or non-Instagram tokens can't be refreshed this way and
    are skipped.
    """
    settings = settings or get_settings()
    current = await get_token(PROVIDER_INSTAGRAM, settings.instagram_access_token)
    prefixes = tuple(settings.instagram_long_lived_prefixes)
    if not current or not current.startswith(prefixes):
        logger.info("Instagram token missing or not long-lived, skipping refresh")
        return RefreshOutcome.SKIPPED

    data = await _request_token(
        INSTAGRAM_REFRESH_URL,
        {"grant_type": "ig_refresh_token", "access_token": current},
        settings=settings,
        http_client=http_client,
    )
    return await _store_refreshed_token(PROVIDER_INSTAGRAM, data, settings=settings)


async def refresh_facebook_token(
    *,
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> RefreshOutcome:
    """Exchange the current Facebook long-lived token for a new one (~every 45 days)."""
    settings = settings or get_settings()
    current = await get_token(PROVIDER_FACEBOOK, settings.facebook_access_token)
    if not current:
        logger.info("Facebook token missing, skipping refresh")
        return RefreshOutcome.SKIPPED

    data = await _request_token(
        FACEBOOK_EXCHANGE_URL,
        {
            "grant_type": "fb_exchange_token",
            "client_id": settings.facebook_app_id,
            "client_secret": settings.facebook_app_secret,
            "fb_exchange_token": current,
        },
        settings=settings,
        http_client=http_client,
    )
    return await _store_refreshed_token(PROVIDER_FACEBOOK, data, settings=settings)


async def run_token_refresh(
    *,
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, str]:
    """Run every provider refresh concurrently and report per-provider outcomes."""
    settings = settings or get_settings()
    results = await asyncio.gather(
        refresh_instagram_token(settings=settings, http_client=http_client),
        refresh_facebook_token(settings=settings, http_client=http_client),
        return_exceptions=True,
    )

    outcomes: dict[str, str] = {}
    for provider, result in zip(REFRESHABLE_PROVIDERS, results):
        if isinstance(result, BaseException):
            logger.error(f"{provider} token refresh failed: {result!r}")
            outcomes[provider] = RefreshOutcome.FAILED.value
        else:
            outcomes[provider] = result.value
    return outcomes


async def list_token_status() -> list[dict[str, Any]]:
    """Stored-token metadata per refreshable provider (no token values)."""
    statuses: list[dict[str, Any]] = []
    for provider in REFRESHABLE_PROVIDERS:
        record = await load_token_record(provider)
        statuses.append(
            {
                "provider": provider,
                "stored": record is not None,
                "updatedAt": record.updated_at if record else None,
            }
        )
    return statuses


async def _request_token(
    url: str,
    params: dict[str, str],
    *,
    settings: Settings,
    http_client: httpx.AsyncClient | None,
) -> dict[str, Any]:
    if http_client is not None:
        resp = await http_client.get(url, params=params)
    else:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            resp = await client.get(url, params=params)
    try:
        data = resp.json()
    except ValueError:
        data = {}
    return data if isinstance(data, dict) else {}


async def _store_refreshed_token(
    provider: str,
    data: dict[str, Any],
    *,
    settings: Settings,
) -> RefreshOutcome:
    new_token = data.get("access_token")
    if not new_token:
        # Graph error payloads ({"error": {...}}) carry no token material.
        logger.error(f"{provider} refresh error: {data}")
        raise TokenRefreshError(f"{provider} refresh response has no access_token")

    await set_token(provider, new_token, settings=settings)
    logger.info(f"{provider} token refreshed (expires_in={data.get('expires_in')})")
    return RefreshOutcome.REFRESHED
