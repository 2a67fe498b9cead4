"""
Pytest configuration and fixtures for ChartCalc tests.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from chartcalc.cache.metadata_cache import MetadataCache
from chartcalc.main import create_app
from chartcalc.schemas.formula import ContentAsset, VariableMetadata


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Deterministic clock for cache tests."""
    return FakeClock()


@pytest.fixture
def event_stats() -> dict[str, Any]:
    """Statistics record of a typical event."""
    return {
        "remoteImages": 10,
        "hostessImages": 25,
        "selfies": 15,
        "indoor": 50,
        "outdoor": 30,
        "stadium": 200,
        "female": 120,
        "male": 160,
        "genAlpha": 20,
        "genYZ": 100,
        "genX": 80,
        "boomer": 80,
        "jersey": 15,
        "approvedImages": 45,
    }


@pytest.fixture
def content_assets() -> list[dict[str, Any]]:
    """Content assets as returned by the asset endpoint."""
    return [
        {
            "slug": "logo-1",
            "title": "Partner Logo",
            "type": "image",
            "content": {"url": "https://x/y.png", "width": 1200, "height": 800},
            "category": "Partners",
            "tags": ["partner", "logo"],
            "usageCount": 3,
        },
        {
            "slug": "exec-summary",
            "title": "Executive Summary",
            "type": "text",
            "content": {"text": 'Record "crowd" day'},
            "category": "Reports",
            "tags": [],
            "usageCount": 1,
        },
    ]


@pytest.fixture
def registry_payload() -> dict[str, Any]:
    """Variable registry response body."""
    return {
        "success": True,
        "variables": [
            {
                "name": "female",
                "label": "Female",
                "category": "Demographics",
                "type": "count",
                "exampleUsage": "[female] / [totalFans] * 100",
            },
            {"name": "male", "label": "Male", "category": "Demographics", "type": "count"},
            {
                "name": "totalFans",
                "label": "Total Fans",
                "category": "Fans",
                "type": "count",
                "derived": True,
            },
            {"name": "ticketRevenue", "label": "Tickets", "category": "Event", "type": "currency"},
        ],
    }


@pytest.fixture
def variable_cache(registry_payload, clock) -> MetadataCache[VariableMetadata]:
    """Variable registry cache backed by the registry_payload fixture."""
    variables = [VariableMetadata.model_validate(v) for v in registry_payload["variables"]]

    async def fetch() -> list[VariableMetadata]:
        return variables

    return MetadataCache("variables", fetch, clock=clock)


@pytest.fixture
def content_asset_cache(content_assets, clock) -> MetadataCache[ContentAsset]:
    """Content asset cache backed by the content_assets fixture."""
    assets = [ContentAsset.model_validate(a) for a in content_assets]

    async def fetch() -> list[ContentAsset]:
        return assets

    return MetadataCache("content assets", fetch, clock=clock)


@pytest.fixture
def app(variable_cache, content_asset_cache) -> FastAPI:
    """Application wired to the in-memory metadata caches."""
    return create_app(variable_cache=variable_cache, content_asset_cache=content_asset_cache)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
