"""Stats endpoint.

GET|POST /?platform=<name>  and  /v1/stats?platform=<name>

Returns {subscribers, likes?, views?} for one of the supported platforms.
Unknown platform -> 422. Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import JSONResponse

from social_stats.schemas import ErrorResponse, StatsResult
from social_stats.services.platforms import AVAILABLE_PLATFORMS, resolve_platform
from social_stats.services.stats import get_platform_stats
from social_stats.settings import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS, get_settings

router = APIRouter()

STATS_METHODS = ["GET", "POST", "OPTIONS"]


def _options_cors_headers(request: Request) -> dict[str, str]:
    """CORS headers for a plain OPTIONS request (no preflight headers required)."""
    origins = get_settings().cors_origins
    origin = request.headers.get("origin")
    if "*" in origins:
        allow_origin = "*"
    elif origin and origin in origins:
        allow_origin = origin
    else:
        return {}
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
        "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
    }


@router.api_route("/", methods=STATS_METHODS, response_model=StatsResult)
@router.api_route("/v1/stats", methods=STATS_METHODS, response_model=StatsResult)
async def get_stats(
    request: Request,
    platform: str | None = Query(
        default=None,
        description="Platform name (case-insensitive)",
        examples=AVAILABLE_PLATFORMS,
    ),
) -> Response:
    """Get follower/engagement counters for one platform.

    Returns:
        StatsResult JSON (absent counters omitted).
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=_options_cors_headers(request))

    resolved = resolve_platform(platform)
    if resolved is None:
        return JSONResponse(
            status_code=422,
            content=ErrorResponse.build(
                code="INVALID_PLATFORM",
                message="Invalid platform",
                detail={"platform": platform, "available": AVAILABLE_PLATFORMS},
            ),
        )

    result = await get_platform_stats(resolved)
    return JSONResponse(content=result.to_payload())
