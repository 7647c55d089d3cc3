"""
API package initialization.

This package contains FastAPI router modules for the response dashboard:
- dashboard: Rollup and unanswered email endpoints
- exports: CSV downloads
"""

from fastapi import APIRouter

from response_metrics.api.dashboard import router as dashboard_router
from response_metrics.api.exports import router as exports_router

# Create main API router
api_router = APIRouter()

api_router.include_router(dashboard_router, tags=["dashboard"])
api_router.include_router(exports_router, prefix="/exports", tags=["exports"])

__all__ = [
    "api_router",
    "dashboard_router",
    "exports_router",
]
