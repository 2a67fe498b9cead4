"""
ChartCalc FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chartcalc.api.v1 import router as v1_router
from chartcalc.cache.metadata_cache import MetadataCache
from chartcalc.cache.sources import build_content_asset_cache, build_variable_cache
from chartcalc.core.config import Settings, settings as default_settings
from chartcalc.core.exceptions import ChartCalcException
from chartcalc.core.logging import get_logger, setup_logging
from chartcalc.schemas.formula import ContentAsset, VariableMetadata

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Warms the variable registry cache so synchronous validation has data
    from the first request on. A failed warm-up is not fatal.
    """
    app_settings: Settings = app.state.settings
    logger.info(f"Starting {app_settings.app_name} v{app_settings.app_version}")
    logger.info(f"Environment: {app_settings.environment}")

    variables = await app.state.variable_cache.get()
    logger.info(f"Variable registry warm-up: {len(variables)} variables")

    yield

    logger.info("Shutting down...")


def create_app(
    app_settings: Settings | None = None,
    variable_cache: MetadataCache[VariableMetadata] | None = None,
    content_asset_cache: MetadataCache[ContentAsset] | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use instead of the environment defaults
        variable_cache: Pre-built variable registry cache
        content_asset_cache: Pre-built content asset cache

    Returns:
        Configured FastAPI application instance
    """
    app_settings = app_settings or default_settings

    setup_logging(
        log_level=app_settings.log_level,
        json_logs=app_settings.environment == "production",
        service=app_settings.app_name,
    )

    app = FastAPI(
        title=app_settings.app_name,
        description="Formula evaluation engine for report charts",
        version=app_settings.app_version,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        openapi_url="/openapi.json" if app_settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.variable_cache = variable_cache or build_variable_cache(app_settings)
    app.state.content_asset_cache = content_asset_cache or build_content_asset_cache(
        app_settings
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, app_settings)

    app.include_router(v1_router, prefix=app_settings.api_v1_prefix)

    return app


def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(ChartCalcException)
    async def chartcalc_exception_handler(
        request: Request,
        exc: ChartCalcException,
    ) -> JSONResponse:
        """Handle ChartCalc custom exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": {"errors": errors},
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")

        # In production, don't expose internal error details
        if app_settings.environment == "production":
            message = "An unexpected error occurred"
        else:
            message = str(exc)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": message,
                }
            },
        )


app = create_app()
