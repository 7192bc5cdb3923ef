"""API route registration."""

from fastapi import FastAPI

from tracelink.observability.logging import get_logger

logger = get_logger(__name__)


def register_routes(app: FastAPI, expose_metrics: bool = True) -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
        expose_metrics: Whether to serve GET /metrics
    """
    from tracelink.api.routes.health import metrics_router
    from tracelink.api.routes.health import router as health_router
    from tracelink.api.routes.work import router as work_router

    app.include_router(health_router, tags=["Health"])
    app.include_router(work_router, tags=["Work"])

    if expose_metrics:
        app.include_router(metrics_router, tags=["Metrics"])

    logger.info("routes_registered", metrics=expose_metrics)
