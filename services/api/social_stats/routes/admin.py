"""Admin endpoints for the provider token store.

GET  /v1/admin/tokens          - stored-token metadata (never token values)
POST /v1/admin/tokens/refresh  - run the Instagram/Facebook renewal now

The cron job (scripts/refresh_tokens.py) runs the same refresh on a schedule.
"""

import logging

from fastapi import APIRouter

from social_stats.schemas import TokenRefreshResponse, TokenStatus, TokenStatusResponse
from social_stats.services.tokens import list_token_status, run_token_refresh

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.get("/tokens", response_model=TokenStatusResponse)
async def get_token_status() -> TokenStatusResponse:
    """List providers with a stored token and when it was last renewed."""
    statuses = await list_token_status()
    return TokenStatusResponse(tokens=[TokenStatus(**s) for s in statuses])


@router.post("/tokens/refresh", response_model=TokenRefreshResponse)
async def trigger_token_refresh() -> TokenRefreshResponse:
    """Refresh Instagram and Facebook long-lived tokens.

    Returns:
        Per-provider outcome: "refreshed", "skipped" or "failed".
    """
    results = await run_token_refresh()
    logger.info(f"Manual token refresh: {results}")
    return TokenRefreshResponse(results=results)
