"""Health check and metrics endpoints."""

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse

from tracelink.api.dependencies import MetricsDep
from tracelink.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

metrics_router = APIRouter()


@router.get("/healthz", response_class=PlainTextResponse)
async def healthz() -> PlainTextResponse:
    """Liveness check."""
    return PlainTextResponse("OK")


@metrics_router.get("/metrics")
async def get_metrics(request: Request, metrics: MetricsDep) -> Response:
    """Get Prometheus metrics.

    Returns the Prometheus text format, or OpenMetrics (which carries the
    trace_id exemplars) when the scraper asks for it in the Accept header.
    """
    logger.debug("metrics_request")

    payload, content_type = metrics.render(request.headers.get("accept"))

    return Response(content=payload, media_type=content_type)
