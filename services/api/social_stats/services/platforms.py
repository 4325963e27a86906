"""Platform clients for follower/engagement counters.

One fetch per platform, each building the vendor request and parsing the
vendor response into a StatsResult:
- facebook / instagram: Graph API node with `followers_count`
- youtube: Data API v3 channel statistics (subscribers + views)
- tiktok: public profile HTML (followers + likes)
- pinterest: v5 user_account
- x: API v2 user lookup with public_metrics
- telegram: Bot API getChatMembersCount

Fetches raise on failure (HTTP status, transport, unparseable body).
Degrading to zero counters is the caller's job (see services.stats).
"""

import logging
import re
from enum import Enum
from typing import Any

import httpx

from social_stats.schemas import StatsResult
from social_stats.services.tokens import PROVIDER_FACEBOOK, PROVIDER_INSTAGRAM, get_token
from social_stats.settings import Settings, get_settings

logger = logging.getLogger("uvicorn.error")


class Platform(str, Enum):
    """Supported platforms, keyed by the `platform` query value."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    PINTEREST = "pinterest"
    X = "x"
    TELEGRAM = "telegram"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Platform.FACEBOOK: "Facebook",
    Platform.INSTAGRAM: "Instagram",
    Platform.YOUTUBE: "YouTube",
    Platform.TIKTOK: "TikTok",
    Platform.PINTEREST: "Pinterest",
    Platform.X: "X",
    Platform.TELEGRAM: "Telegram",
}

AVAILABLE_PLATFORMS: list[str] = [p.value for p in Platform]

# Desktop browser headers; TikTok serves the stats blob only to browser-like clients.
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/110.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en",
}

_TIKTOK_FOLLOWERS_RE = re.compile(r'"followerCount":(\d+)')
_TIKTOK_LIKES_RE = re.compile(r'"heartCount":(\d+)')


class PlatformError(RuntimeError):
    """Vendor answered, but the answer can't be turned into counters."""


def resolve_platform(value: str | None) -> Platform | None:
    """Map a raw `platform` query value to a Platform (case-insensitive)."""
    if not value:
        return None
    try:
        return Platform(value.strip().lower())
    except ValueError:
        return None


def empty_stats(platform: Platform) -> StatsResult:
    """Zero counters returned when a fetch fails."""
    if platform is Platform.TIKTOK:
        return StatsResult(subscribers=0, likes=0)
    return StatsResult(subscribers=0)


def _to_count(value: Any) -> int:
    """Normalize a vendor counter (int, numeric string, or missing) to int >= 0."""
    if value is None or value == "":
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError) as e:
        raise PlatformError(f"Non-numeric counter: {value!r}") from e
    return max(count, 0)


class SocialStatsClient:
    """Client for the vendor APIs behind each platform."""

    FACEBOOK_GRAPH_URL = "https://graph.facebook.com/v22.0"
    INSTAGRAM_GRAPH_URL = "https://graph.instagram.com/v17.0"
    YOUTUBE_CHANNELS_URL = "https://www.googleapis.com/youtube/v3/channels"
    TIKTOK_PROFILE_URL = "https://www.tiktok.com/@{user}"
    PINTEREST_ACCOUNT_URL = "https://api.pinterest.com/v5/user_account"
    X_USER_URL = "https://api.twitter.com/2/users/by/username/{username}"
    TELEGRAM_MEMBERS_URL = "https://api.telegram.org/bot{token}/getChatMembersCount"

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize client with settings and an optional shared HTTP client."""
        self.settings = settings or get_settings()
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.settings.http_timeout)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch(self, platform: Platform) -> StatsResult:
        """Fetch counters for a platform.

        Raises:
            httpx.HTTPError: Transport failure or non-2xx vendor response.
            PlatformError: Vendor payload can't be parsed into counters.
        """
        fetchers = {
            Platform.FACEBOOK: self.fetch_facebook,
            Platform.INSTAGRAM: self.fetch_instagram,
            Platform.YOUTUBE: self.fetch_youtube,
            Platform.TIKTOK: self.fetch_tiktok,
            Platform.PINTEREST: self.fetch_pinterest,
            Platform.X: self.fetch_x,
            Platform.TELEGRAM: self.fetch_telegram,
        }
        return await fetchers[platform]()

    async def fetch_facebook(self) -> StatsResult:
        token = await get_token(PROVIDER_FACEBOOK, self.settings.facebook_access_token)
        data = await self._get_json(
            f"{self.FACEBOOK_GRAPH_URL}/{self.settings.facebook_page_id}",
            params={"access_token": token, "fields": "followers_count"},
            headers=BROWSER_HEADERS,
        )
        return self._parse_graph_followers(data)

    async def fetch_instagram(self) -> StatsResult:
        token = await get_token(PROVIDER_INSTAGRAM, self.settings.instagram_access_token)
        data = await self._get_json(
            f"{self.INSTAGRAM_GRAPH_URL}/{self.settings.instagram_page_id}",
            params={"access_token": token, "fields": "followers_count"},
            headers=BROWSER_HEADERS,
        )
        return self._parse_graph_followers(data)

    async def fetch_youtube(self) -> StatsResult:
        data = await self._get_json(
            self.YOUTUBE_CHANNELS_URL,
            params={
                "part": "statistics",
                "id": self.settings.youtube_channel_id,
                "key": self.settings.youtube_api_key,
            },
            headers=BROWSER_HEADERS,
        )
        return self._parse_youtube_statistics(data)

    async def fetch_tiktok(self) -> StatsResult:
        client = await self._get_client()
        response = await client.get(
            self.TIKTOK_PROFILE_URL.format(user=self.settings.tiktok_user),
            headers=BROWSER_HEADERS,
        )
        response.raise_for_status()
        return self._parse_tiktok_profile(response.text)

    async def fetch_pinterest(self) -> StatsResult:
        data = await self._get_json(
            self.PINTEREST_ACCOUNT_URL,
            headers={"Authorization": f"Bearer {self.settings.pinterest_access_token}"},
        )
        return StatsResult(subscribers=_to_count(data.get("follower_count")))

    async def fetch_x(self) -> StatsResult:
        data = await self._get_json(
            self.X_USER_URL.format(username=self.settings.x_user_id),
            params={"user.fields": "public_metrics"},
            headers={"Authorization": f"Bearer {self.settings.x_bearer_token}"},
        )
        return self._parse_x_user(data)

    async def fetch_telegram(self) -> StatsResult:
        client = await self._get_client()
        # Bot API reports failures in the body ({"ok": false, ...}), often with a 4xx.
        response = await client.get(
            self.TELEGRAM_MEMBERS_URL.format(token=self.settings.telegram_bot_token),
            params={"chat_id": self.settings.telegram_chat_id},
        )
        data = response.json()
        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise PlatformError(f"Failed to fetch Telegram data: {description or response.status_code}")
        return StatsResult(subscribers=_to_count(data.get("result")))

    async def _get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET a vendor URL and return its JSON object body."""
        client = await self._get_client()
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise PlatformError(f"Unexpected response from {httpx.URL(url).host}")
        return data

    def _parse_graph_followers(self, data: dict[str, Any]) -> StatsResult:
        """Parse a Graph API node (page/group/user) into subscribers."""
        return StatsResult(
            subscribers=_to_count(data.get("member_count") or data.get("followers_count"))
        )

    def _parse_youtube_statistics(self, data: dict[str, Any]) -> StatsResult:
        """Parse channels.list?part=statistics.

        YouTube reports counters as strings; an unknown channel yields no items.
        """
        items = data.get("items") or []
        statistics = items[0].get("statistics", {}) if items and isinstance(items[0], dict) else {}
        return StatsResult(
            subscribers=_to_count(statistics.get("subscriberCount")),
            views=_to_count(statistics.get("viewCount")),
        )

    def _parse_tiktok_profile(self, html: str) -> StatsResult:
        """Extract follower/heart counters from the profile page's embedded JSON."""
        followers = _TIKTOK_FOLLOWERS_RE.search(html)
        likes = _TIKTOK_LIKES_RE.search(html)
        return StatsResult(
            subscribers=int(followers.group(1)) if followers else 0,
            likes=int(likes.group(1)) if likes else 0,
        )

    def _parse_x_user(self, data: dict[str, Any]) -> StatsResult:
        user = data.get("data")
        if not isinstance(user, dict):
            # v2 returns 200 with an "errors" array for unknown usernames.
            raise PlatformError(f"X user lookup failed: {data.get('errors') or data}")
        metrics = user.get("public_metrics") or {}
        return StatsResult(subscribers=_to_count(metrics.get("followers_count")))
