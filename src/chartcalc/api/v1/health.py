"""
Health check endpoints.

Provides endpoints for monitoring application health and metadata cache state.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from chartcalc.api.deps import ContentAssetCache, VariableCache
from chartcalc.core.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    environment: str
    version: str


class CacheStatus(BaseModel):
    """State of one metadata cache."""

    valid: bool = Field(..., description="Snapshot exists and is within its TTL")
    entries: int = Field(..., description="Number of cached records")
    age_seconds: float | None = Field(None, description="Seconds since last refresh")


class CacheStatusResponse(BaseModel):
    """Metadata cache status."""

    variables: CacheStatus
    content_assets: CacheStatus


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(
        status="healthy",
        environment=settings.environment,
        version=settings.app_version,
    )


@router.get("/health/cache", response_model=CacheStatusResponse)
async def cache_status(
    variable_cache: VariableCache,
    asset_cache: ContentAssetCache,
) -> CacheStatusResponse:
    """Report metadata cache state without triggering a refresh."""
    return CacheStatusResponse(
        variables=CacheStatus(
            valid=variable_cache.is_valid(),
            entries=len(variable_cache.get_cached()),
            age_seconds=variable_cache.age(),
        ),
        content_assets=CacheStatus(
            valid=asset_cache.is_valid(),
            entries=len(asset_cache.get_cached()),
            age_seconds=asset_cache.age(),
        ),
    )
