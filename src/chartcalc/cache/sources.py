"""HTTP fetchers for the variable registry and content asset endpoints.

Both endpoints answer with ``{"success": true, "<key>": [...]}``. They are
only called when a metadata cache refreshes.
"""

from functools import partial
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from chartcalc.cache.metadata_cache import MetadataCache
from chartcalc.core.config import Settings
from chartcalc.core.exceptions import MetadataFetchError
from chartcalc.core.logging import get_logger
from chartcalc.schemas.formula import ContentAsset, VariableMetadata

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def _fetch_collection(
    source: str,
    url: str,
    key: str,
    model: type[ModelT],
    timeout: float,
    transport: httpx.AsyncBaseTransport | None,
) -> list[ModelT]:
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            response = await client.get(url, headers={"Cache-Control": "no-store"})
            response.raise_for_status()
            payload: Any = response.json()
        except httpx.HTTPError as e:
            raise MetadataFetchError(source, str(e)) from e
        except ValueError as e:
            raise MetadataFetchError(source, "response is not valid JSON") from e

    if not isinstance(payload, dict) or not payload.get("success"):
        raise MetadataFetchError(source, "request was not successful")
    items = payload.get(key)
    if not isinstance(items, list):
        raise MetadataFetchError(source, f"response has no '{key}' list")

    records: list[ModelT] = []
    for raw in items:
        try:
            records.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping invalid {source} entry: {e.error_count()} errors")
    return records


async def fetch_variables(
    url: str,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[VariableMetadata]:
    """
    Fetch the variable registry.

    Args:
        url: Registry endpoint
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests)

    Returns:
        Registry entries

    Raises:
        MetadataFetchError: On HTTP failure or malformed payload
    """
    return await _fetch_collection("variables", url, "variables", VariableMetadata, timeout, transport)


async def fetch_content_assets(
    url: str,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ContentAsset]:
    """
    Fetch the content asset list.

    Raises:
        MetadataFetchError: On HTTP failure or malformed payload
    """
    return await _fetch_collection("content assets", url, "assets", ContentAsset, timeout, transport)


def build_variable_cache(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MetadataCache[VariableMetadata]:
    """Create the variable registry cache from settings."""
    return MetadataCache(
        "variables",
        partial(fetch_variables, settings.variables_url, settings.metadata_fetch_timeout, transport),
        ttl_seconds=settings.metadata_cache_ttl_seconds,
    )


def build_content_asset_cache(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MetadataCache[ContentAsset]:
    """Create the content asset cache from settings."""
    return MetadataCache(
        "content assets",
        partial(
            fetch_content_assets,
            settings.content_assets_url,
            settings.metadata_fetch_timeout,
            transport,
        ),
        ttl_seconds=settings.metadata_cache_ttl_seconds,
    )
