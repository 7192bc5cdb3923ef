"""FastAPI application factory.

Creates the FastAPI application, wires the request pipeline onto
app.state and registers routes and exception handlers.
"""

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider

from tracelink import __version__
from tracelink.api.routes import register_routes
from tracelink.bootstrap import build_orchestrator
from tracelink.config import Settings, get_settings
from tracelink.observability.logging import get_logger
from tracelink.observability.metrics import MetricsRegistry
from tracelink.observability.tracing import get_tracer
from tracelink.workload.models import FAILURE_BODY
from tracelink.workload.orchestrator import WorkOrchestrator

logger = get_logger(__name__)

# Searched in the full request URL, host included
SCRAPE_PATH_PATTERN = "/metrics$"


def create_app(
    settings: Settings | None = None,
    tracer_provider: TracerProvider | None = None,
    meter_provider: MeterProvider | None = None,
    metrics: MetricsRegistry | None = None,
    orchestrator: WorkOrchestrator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, loaded from config when omitted
        tracer_provider: Provider for root and child spans, the global one when omitted
        meter_provider: Provider for HTTP server metrics, the global one when omitted
        metrics: Metric registry, a fresh one when omitted
        orchestrator: Prebuilt orchestrator, built from settings when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    metrics = metrics or MetricsRegistry()
    orchestrator = orchestrator or build_orchestrator(
        settings, get_tracer(tracer_provider), metrics
    )

    app = FastAPI(
        title="Tracelink",
        description="Demo service emitting correlated traces, metrics and logs",
        version=__version__,
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.orchestrator = orchestrator

    _register_exception_handlers(app)

    register_routes(app, expose_metrics=settings.observability.metrics.expose_endpoint)

    # Opens the root span of every request; child spans nest under it
    if settings.observability.tracing.enabled:
        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=tracer_provider,
            meter_provider=meter_provider,
            excluded_urls=SCRAPE_PATH_PATTERN,
        )
        logger.info("opentelemetry_instrumentation_enabled")

    logger.info(
        "app_created",
        debug=settings.debug,
        max_latency_ms=settings.workload.max_latency_ms,
        failure_rate=settings.workload.failure_rate,
    )

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )

        return PlainTextResponse(FAILURE_BODY, status_code=500)

    logger.debug("exception_handlers_registered")
