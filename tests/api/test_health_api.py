"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient

from chartcalc.core.config import settings


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test the basic health check endpoint."""
    response = await client.get(f"{settings.api_v1_prefix}/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["environment"] == settings.environment
    assert data["version"] == settings.app_version


@pytest.mark.asyncio
async def test_cache_status_cold(client: AsyncClient):
    """Cache status does not load anything."""
    response = await client.get(f"{settings.api_v1_prefix}/health/cache")

    assert response.status_code == 200
    data = response.json()
    assert data["variables"] == {"valid": False, "entries": 0, "age_seconds": None}
    assert data["content_assets"]["entries"] == 0


@pytest.mark.asyncio
async def test_cache_status_after_load(client: AsyncClient, variable_cache, clock):
    """Test cache status once the registry has been read."""
    await client.get(f"{settings.api_v1_prefix}/variables")
    clock.advance(10)

    response = await client.get(f"{settings.api_v1_prefix}/health/cache")

    data = response.json()
    assert data["variables"] == {"valid": True, "entries": 4, "age_seconds": 10.0}
    assert data["content_assets"]["valid"] is False
