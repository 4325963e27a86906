"""API routes."""

from fastapi import APIRouter

from social_stats.routes import admin, stats

api_router = APIRouter()

# Stats endpoints (?platform=...)
api_router.include_router(stats.router, tags=["stats"])

# Admin endpoints (token store management)
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
