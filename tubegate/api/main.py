"""FastAPI application for the video gateway"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI

from .middleware import (
    ApiKeyMiddleware, RateLimitMiddleware, RequestLoggingMiddleware,
    SecurityHeadersMiddleware
)
from .video_routes import router as video_router
from ..clients.base import SearchProvider, FormatProvider
from ..clients.youtube_search_client import YouTubeSearchClient
from ..clients.youtube_format_client import YouTubeFormatClient
from ..core.error_handler import ErrorHandler, get_error_handler, register_exception_handlers
from ..core.exceptions import ConfigurationError
from ..core.logging import setup_logging, get_logger, get_performance_metrics
from ..core.rate_limiter import FixedWindowRateLimiter
from ..core.settings import Settings, get_settings
from ..models.video_models import HealthResponse
from ..services.video_service import VideoGatewayService

__version__ = "1.0.0"

HEALTH_PATH = "/health"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = app.state.settings
    app.state.started_at = datetime.now()
    logger.info(f"YouTube API server running on port {settings.port}")
    yield
    logger.info("Shutting down YouTube API server...")


def check_api_key(settings: Settings) -> None:
    """Refuse the placeholder secret in production, warn about it elsewhere"""
    if not settings.uses_placeholder_api_key:
        return
    if settings.is_production:
        raise ConfigurationError("API_KEY must be set in production")
    logger.warning("API_KEY is not set; using the built-in placeholder key")


def create_app(
    settings: Optional[Settings] = None,
    search_provider: Optional[SearchProvider] = None,
    format_provider: Optional[FormatProvider] = None,
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
    error_handler: Optional[ErrorHandler] = None
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        settings: Configuration (if None, loads from environment)
        search_provider: Search backend (defaults to YouTubeSearchClient)
        format_provider: Format backend (defaults to YouTubeFormatClient)
        rate_limiter: Limiter holding the per-client counters
        error_handler: Exception-to-response mapping

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    check_api_key(settings)

    rate_limiter = rate_limiter or FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds
    )
    error_handler = error_handler or get_error_handler()

    app = FastAPI(
        title="YouTube API Gateway",
        description="Video search and direct download link resolution",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None
    )

    app.state.settings = settings
    app.state.started_at = datetime.now()
    app.state.rate_limiter = rate_limiter
    app.state.video_service = VideoGatewayService(
        search_provider=search_provider or YouTubeSearchClient(),
        format_provider=format_provider or YouTubeFormatClient(),
        search_result_limit=settings.search_result_limit
    )

    # Added innermost first: requests pass security headers, then the
    # rate limiter, then the API key check.
    app.add_middleware(
        ApiKeyMiddleware,
        api_key=settings.api_key,
        exempt_paths=[HEALTH_PATH],
        error_handler=error_handler
    )
    app.add_middleware(RateLimitMiddleware, limiter=rate_limiter, error_handler=error_handler)
    app.add_middleware(SecurityHeadersMiddleware, error_handler=error_handler)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app, error_handler)
    app.include_router(video_router)

    @app.get(HEALTH_PATH, response_model=HealthResponse, tags=["health"])
    async def health_check():
        """Health check endpoint"""
        now = datetime.now()
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=now.isoformat(),
            uptime_seconds=(now - app.state.started_at).total_seconds(),
            operations=get_performance_metrics()
        )

    return app


# Setup logging
setup_logging()

app = create_app()

