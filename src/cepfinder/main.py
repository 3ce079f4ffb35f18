"""FastAPI application factory."""
from fastapi import FastAPI
from cepfinder.config import get_settings
from cepfinder.api.v1 import lookup, health, metrics
from cepfinder.observability.metrics import init_system_info
from cepfinder.observability.middleware import MetricsMiddleware

settings = get_settings()


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
    )

    # Add middleware
    app.add_middleware(MetricsMiddleware, metrics_path=f"{settings.API_PREFIX}/metrics")

    # Initialize metrics
    init_system_info(settings.APP_VERSION)

    # Include routers
    app.include_router(lookup.router, prefix=settings.API_PREFIX, tags=["lookup"])
    app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])
    app.include_router(metrics.router, prefix=settings.API_PREFIX)

    return app


# Create app instance
app = create_app()
