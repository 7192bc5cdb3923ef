"""Prometheus metrics for Tracelink.

Metrics live in an explicitly constructed MetricsRegistry rather than the
prometheus_client default registry, so the app and tests each get their own.

Latency observations go through a LatencyRecorder. Two variants exist:
ExemplarLatencyRecorder attaches the request's trace id as an exemplar,
PlainLatencyRecorder records label-only observations. Which one is used is
decided by configuration, not by inspecting the backend at runtime.

Independently of the scrape endpoint, setup_metrics_export pushes the
OpenTelemetry HTTP server metrics to the collector over OTLP.
"""

from collections.abc import Sequence
from typing import ClassVar, Protocol

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from prometheus_client import CollectorRegistry, Counter, Histogram
from prometheus_client.exposition import choose_encoder

from tracelink.errors import TelemetrySetupError
from tracelink.observability.logging import get_logger
from tracelink.observability.tracing import build_resource, resolve_otlp_endpoint

logger = get_logger(__name__)

LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.2, 0.3, 0.4, 0.5, 0.75, 1.0)

# OpenMetrics caps exemplar label names plus values at 128 characters
EXEMPLAR_MAX_RUNES = 128


def exemplar_fits(exemplar: dict[str, str]) -> bool:
    """Whether an exemplar label set is within the OpenMetrics limit."""
    return sum(len(name) + len(value) for name, value in exemplar.items()) <= EXEMPLAR_MAX_RUNES


class MetricsRegistry:
    """Process-wide metric state for the request pipeline.

    prometheus_client guards every child metric with its own lock, so
    observations from concurrent requests never corrupt bucket counts.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.request_latency = Histogram(
            "http_request_duration_seconds",
            "Latency of /work requests in seconds",
            labelnames=["method", "status"],
            buckets=LATENCY_BUCKETS,
            registry=self.registry,
        )

        self.request_count = Counter(
            "work_requests",
            "Total number of /work requests by outcome",
            labelnames=["method", "status"],
            registry=self.registry,
        )

    def observation_count(self, method: str, status: str) -> float:
        """Return how many latency observations exist for a label pair."""
        value = self.registry.get_sample_value(
            "http_request_duration_seconds_count",
            {"method": method, "status": status},
        )
        return value or 0.0

    def render(self, accept: str | None = None) -> tuple[bytes, str]:
        """Render the exposition text negotiated from an Accept header.

        Exemplars are only part of the OpenMetrics format, which scrapers
        request with 'Accept: application/openmetrics-text'.

        Returns:
            Encoded payload and its content type
        """
        encoder, content_type = choose_encoder(accept or "")
        return encoder(self.registry), content_type


class LatencyRecorder(Protocol):
    """Records the duration of one request into the latency histogram."""

    supports_exemplars: ClassVar[bool]

    def observe(
        self,
        duration_seconds: float,
        method: str,
        status: str,
        trace_id: str | None,
    ) -> None:
        """Record one observation. Never raises."""
        ...


class PlainLatencyRecorder:
    """Label-only latency recorder. The trace id is ignored."""

    supports_exemplars: ClassVar[bool] = False

    def __init__(self, metrics: MetricsRegistry) -> None:
        self.metrics = metrics

    def observe(
        self,
        duration_seconds: float,
        method: str,
        status: str,
        trace_id: str | None,  # noqa: ARG002
    ) -> None:
        """Record a plain observation."""
        try:
            self.metrics.request_latency.labels(method=method, status=status).observe(
                duration_seconds
            )
            self.metrics.request_count.labels(method=method, status=status).inc()
        except Exception as e:
            logger.warning("metric_observe_failed", error=str(e), status=status)


class ExemplarLatencyRecorder:
    """Latency recorder that links each observation to its trace.

    Falls back to a plain observation when there is no trace id or when the
    exemplar would break the OpenMetrics size limit, so the histogram count
    always increments.
    """

    supports_exemplars: ClassVar[bool] = True

    def __init__(self, metrics: MetricsRegistry, log_on_fallback: bool = True) -> None:
        self.metrics = metrics
        self.log_on_fallback = log_on_fallback

    def observe(
        self,
        duration_seconds: float,
        method: str,
        status: str,
        trace_id: str | None,
    ) -> None:
        """Record an observation carrying a trace_id exemplar."""
        exemplar: dict[str, str] | None = None
        if trace_id is None:
            self._fallback("missing_trace_id", status)
        elif not exemplar_fits({"trace_id": trace_id}):
            self._fallback("exemplar_too_long", status)
        else:
            exemplar = {"trace_id": trace_id}

        try:
            # Histogram.observe counts before it validates the exemplar, so
            # invalid exemplars must never reach it
            self.metrics.request_latency.labels(method=method, status=status).observe(
                duration_seconds, exemplar=exemplar
            )
            self.metrics.request_count.labels(method=method, status=status).inc(
                exemplar=exemplar
            )
        except Exception as e:
            logger.warning("metric_observe_failed", error=str(e), status=status)

    def _fallback(self, reason: str, status: str) -> None:
        if self.log_on_fallback:
            logger.warning("exemplar_fallback", reason=reason, status=status)


def create_latency_recorder(
    metrics: MetricsRegistry,
    exemplars_enabled: bool = True,
    log_on_fallback: bool = True,
) -> LatencyRecorder:
    """Build the latency recorder variant selected by configuration."""
    if exemplars_enabled:
        return ExemplarLatencyRecorder(metrics, log_on_fallback=log_on_fallback)
    return PlainLatencyRecorder(metrics)


def setup_metrics_export(
    service_name: str = "sample-app",
    service_version: str = "1.0.0",
    otlp_endpoint: str | None = None,
    export_interval_ms: int = 60000,
    export: bool = True,
    readers: Sequence[MetricReader] = (),
) -> MeterProvider:
    """Initialize the OpenTelemetry meter provider.

    The FastAPI instrumentation records HTTP server durations through this
    provider, which pushes them to the same collector as the traces.

    Args:
        service_name: Name to identify this service in metrics
        service_version: Version reported on the resource
        otlp_endpoint: OTLP gRPC endpoint, resolved like the trace endpoint
        export_interval_ms: Interval between pushes to the collector
        export: Attach the periodic OTLP reader at all
        readers: Additional metric readers

    Returns:
        Configured MeterProvider, also installed as the global provider

    Raises:
        TelemetrySetupError: If the resource or exporter cannot be built
    """
    try:
        metric_readers = list(readers)

        if export:
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )

            endpoint = resolve_otlp_endpoint(otlp_endpoint)
            metric_readers.append(
                PeriodicExportingMetricReader(
                    OTLPMetricExporter(endpoint=endpoint, insecure=True),
                    export_interval_millis=export_interval_ms,
                )
            )
            logger.info("metrics_exporter_configured", endpoint=endpoint)

        provider = MeterProvider(
            resource=build_resource(service_name, service_version),
            metric_readers=metric_readers,
        )
    except Exception as e:
        raise TelemetrySetupError(f"Failed to set up metrics export: {e}") from e

    otel_metrics.set_meter_provider(provider)

    return provider
