"""
YourTyme Backend - FastAPI Application
Main entry point for the YourTyme Slack add-on backend.
Stores each teammate's city and renders everyone's local time on the Slack Home tab.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from yourtyme.api.exception_handlers import setup_exception_handlers
from yourtyme.core.config import is_production, settings
from yourtyme.core.logging import get_logger, log_request, setup_logging
from yourtyme.infrastructure.cache.redis_client import redis_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Refuses to start without the Slack credentials.
    """
    # Startup
    setup_logging()
    settings.validate_required()
    logger.info(f"{settings.APP_NAME} starting in {settings.ENVIRONMENT} mode")
    yield
    # Shutdown
    await redis_client.disconnect()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="YourTyme Backend",
        description="Slack add-on showing every teammate's city and local time on the App Home tab",
        version="1.0.0",
        docs_url="/docs" if not is_production() else None,
        redoc_url="/redoc" if not is_production() else None,
        openapi_url="/openapi.json" if not is_production() else None,
        lifespan=lifespan,
    )

    logger.info(f"CORS configured with origins: {settings.ALLOWED_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Trusted host middleware
    if is_production():
        logger.info(
            f"TrustedHost middleware enabled with hosts: {settings.ALLOWED_HOSTS}"
        )
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.ALLOWED_HOSTS,
        )
    else:
        logger.info("TrustedHost middleware disabled (development mode)")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        log_request(
            request.method,
            request.url.path,
            response.status_code,
            round(time.perf_counter() - started, 4),
        )
        return response

    setup_exception_handlers(app)

    from yourtyme.api.routers import (
        community_router,
        dashboard_router,
        profile_router,
        slack_router,
    )

    app.include_router(profile_router.router, prefix="/slack", tags=["Profiles"])
    app.include_router(community_router.router, prefix="/slack", tags=["Communities"])
    app.include_router(slack_router.router, prefix="/slack", tags=["Slack"])
    app.include_router(dashboard_router.router, tags=["Dashboard"])

    @app.get("/")
    async def root():
        """Root endpoint for health check."""
        return {"message": "API is working"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "features_enabled": {
                "slack_events": bool(settings.SLACK_SIGNING_SECRET),
                "slack_oauth": bool(
                    settings.SLACK_CLIENT_ID and settings.SLACK_CLIENT_SECRET
                ),
                "worldtime": bool(settings.API_NINJAS_KEY),
            },
        }

    return app


# Create the FastAPI app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "yourtyme.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
