"""Pydantic schemas for API request/response validation."""

from social_stats.schemas.common import ErrorDetail, ErrorResponse
from social_stats.schemas.stats import (
    StatsResult,
    TokenRefreshResponse,
    TokenStatus,
    TokenStatusResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "StatsResult",
    "TokenRefreshResponse",
    "TokenStatus",
    "TokenStatusResponse",
]
