"""Schemas for the stats endpoint and the admin token endpoints."""

from pydantic import BaseModel, Field


class StatsResult(BaseModel):
    """Normalized follower/engagement counts for one platform.

    Optional counters are omitted from the JSON body when a platform
    doesn't report them.
    """

    subscribers: int = Field(default=0, ge=0)
    likes: int | None = Field(default=None, ge=0)
    views: int | None = Field(default=None, ge=0)

    def to_payload(self) -> dict[str, int]:
        """Serialize for the wire/cache, dropping absent counters."""
        return self.model_dump(exclude_none=True)


class TokenStatus(BaseModel):
    """Stored-token metadata for one provider (never the token value)."""

    provider: str
    stored: bool
    updated_at: int | None = Field(alias="updatedAt", default=None)

    model_config = {"populate_by_name": True}


class TokenStatusResponse(BaseModel):
    """Response for GET /v1/admin/tokens."""

    tokens: list[TokenStatus]


class TokenRefreshResponse(BaseModel):
    """Response for POST /v1/admin/tokens/refresh."""

    results: dict[str, str]
