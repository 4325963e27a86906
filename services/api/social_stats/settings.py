"""Application settings via Pydantic Settings."""

from functools import lru_cache
from typing import Annotated
import json

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Fixed CORS policy for the stats endpoints; origins come from settings.
CORS_ALLOW_METHODS = ["GET", "POST", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "X-Requested-With"]


def _parse_list(v: object) -> list[str]:
    """
    Parse a list-valued env var (CORS origins, token prefixes).

    Accept either:
    - JSON array string: '["IGQVJ","IGAA"]'
    - Comma-separated string: "https://a.com,http://localhost:3000"
    - Already-parsed list[str]
    """
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(x).strip() for x in v if str(x).strip()]
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return []
        if s.startswith("["):
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError:
                # Fall back to comma split if env var isn't valid JSON.
                parsed = s.split(",")
            if isinstance(parsed, list):
                return [str(x).strip() for x in parsed if str(x).strip()]
            return [str(parsed).strip()]
        return [part.strip() for part in s.split(",") if part.strip()]
    return [str(v).strip()] if str(v).strip() else []


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Social Stats API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Redis (stats cache + token store)
    redis_url: str = "redis://localhost:6379/0"

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        validation_alias=AliasChoices("CORS_ORIGINS", "ALLOWED_ORIGINS"),
    )

    @field_validator("cors_origins", "instagram_long_lived_prefixes", mode="before")
    @classmethod
    def _parse_list_fields(cls, v: object) -> list[str]:
        return _parse_list(v)

    # Stats cache
    stats_cache_enabled: bool = Field(
        default=False,
        description="Serve platform stats through the Redis read-through cache",
    )
    stats_cache_ttl: int = Field(default=60, ge=1, le=86400)

    # Token store
    token_ttl_days: int = Field(default=60, ge=1, le=365)

    # Outbound HTTP
    http_timeout: float = Field(default=15.0, gt=0)

    # Facebook (Graph API)
    facebook_page_id: str = ""
    facebook_access_token: str = ""
    facebook_app_id: str = ""
    facebook_app_secret: str = ""

    # Instagram (Graph API)
    instagram_page_id: str = ""
    instagram_access_token: str = ""
    instagram_long_lived_prefixes: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["IGQVJ", "IGAA"],
        description="Token prefixes eligible for ig_refresh_token renewal",
    )

    # YouTube Data API
    youtube_channel_id: str = ""
    youtube_api_key: str = ""

    # TikTok (public profile page)
    tiktok_user: str = ""

    # Pinterest
    pinterest_access_token: str = ""

    # X (Twitter API v2); username, despite the name
    x_user_id: str = ""
    x_bearer_token: str = ""

    # Telegram Bot API
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
