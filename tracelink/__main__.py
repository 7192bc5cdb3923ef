"""Process entry point: configure telemetry, then serve the API with uvicorn.

Any failure while building settings, the tracer or meter provider, or their
exporters propagates and ends the process before traffic is served.
"""

import uvicorn

from tracelink.api.app import create_app
from tracelink.config import get_settings
from tracelink.observability.logging import get_logger, setup_logging
from tracelink.observability.metrics import setup_metrics_export
from tracelink.observability.tracing import setup_tracing

logger = get_logger(__name__)


def main() -> None:
    """Run the Tracelink server."""
    settings = get_settings()
    observability = settings.observability

    setup_logging(level=observability.logging.level, format=observability.logging.format)

    tracer_provider = None
    if observability.tracing.enabled:
        tracer_provider = setup_tracing(
            service_name=observability.tracing.service_name,
            service_version=observability.tracing.service_version,
            otlp_endpoint=observability.tracing.otlp_endpoint,
            console_export=observability.tracing.console_export,
        )

    meter_provider = None
    if observability.metrics.otlp_export:
        meter_provider = setup_metrics_export(
            service_name=observability.tracing.service_name,
            service_version=observability.tracing.service_version,
            otlp_endpoint=observability.tracing.otlp_endpoint,
            export_interval_ms=observability.metrics.export_interval_ms,
        )

    app = create_app(settings, tracer_provider=tracer_provider, meter_provider=meter_provider)

    logger.info("server_starting", host=settings.api.host, port=settings.api.port)
    try:
        uvicorn.run(
            app,
            host=settings.api.host,
            port=settings.api.port,
            access_log=settings.api.access_log,
        )
    finally:
        if tracer_provider is not None:
            tracer_provider.shutdown()
        if meter_provider is not None:
            meter_provider.shutdown()
        logger.info("server_stopped")


if __name__ == "__main__":
    main()
