"""API v1 router aggregator."""

from fastapi import APIRouter

from app.api.v1.press_releases.routes import router as press_releases_router

api_router = APIRouter()

api_router.include_router(
    press_releases_router,
    prefix="/press-releases",
    tags=["Press Releases"],
)
