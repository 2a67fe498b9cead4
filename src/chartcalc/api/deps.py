"""
FastAPI dependency injection functions.

The metadata caches are process-wide and live on app.state.
"""

from typing import Annotated

from fastapi import Depends, Request

from chartcalc.cache.metadata_cache import MetadataCache
from chartcalc.schemas.formula import ContentAsset, VariableMetadata


def get_variable_cache(request: Request) -> MetadataCache[VariableMetadata]:
    """Variable registry cache of the running app."""
    return request.app.state.variable_cache


def get_content_asset_cache(request: Request) -> MetadataCache[ContentAsset]:
    """Content asset cache of the running app."""
    return request.app.state.content_asset_cache


VariableCache = Annotated[MetadataCache[VariableMetadata], Depends(get_variable_cache)]
ContentAssetCache = Annotated[MetadataCache[ContentAsset], Depends(get_content_asset_cache)]
