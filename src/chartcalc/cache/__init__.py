"""Metadata cache layer for ChartCalc."""

from chartcalc.cache.metadata_cache import CacheEntry, MetadataCache
from chartcalc.cache.sources import (
    build_content_asset_cache,
    build_variable_cache,
    fetch_content_assets,
    fetch_variables,
)

__all__ = [
    "CacheEntry",
    "MetadataCache",
    "build_content_asset_cache",
    "build_variable_cache",
    "fetch_content_assets",
    "fetch_variables",
]
