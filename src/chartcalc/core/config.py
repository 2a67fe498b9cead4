"""
Application configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    app_name: str = Field(default="ChartCalc", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 prefix")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Metadata Sources
    # ==========================================================================
    variables_url: str = Field(
        default="http://localhost:3000/api/variables-config",
        description="Variable registry endpoint",
    )
    content_assets_url: str = Field(
        default="http://localhost:3000/api/content-assets",
        description="Content asset endpoint",
    )
    metadata_fetch_timeout: float = Field(
        default=10.0, description="Timeout in seconds for metadata refresh requests"
    )

    # ==========================================================================
    # Metadata Cache
    # ==========================================================================
    metadata_cache_ttl_seconds: float = Field(
        default=300.0, description="Variable registry / content asset cache TTL"
    )

    @field_validator("metadata_cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, v: float) -> float:
        """A zero or negative TTL would refresh on every access."""
        if v <= 0:
            raise ValueError("METADATA_CACHE_TTL_SECONDS must be greater than zero")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
