"""Observability configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Log level")
    format: LogFormat = Field(default="json", description="Output format")


class TracingConfig(BaseModel):
    """Distributed tracing configuration."""

    enabled: bool = Field(default=True, description="Enable tracing")
    service_name: str = Field(default="sample-app", description="Service name for traces")
    service_version: str = Field(default="1.0.0", description="Service version for traces")
    otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP gRPC exporter endpoint (falls back to OTEL_EXPORTER_OTLP_ENDPOINT)",
    )
    console_export: bool = Field(
        default=False,
        description="Also print finished spans to stdout",
    )


class MetricsConfig(BaseModel):
    """Metrics configuration."""

    expose_endpoint: bool = Field(default=True, description="Serve GET /metrics")
    exemplars_enabled: bool = Field(
        default=True,
        description="Attach trace_id exemplars to latency observations",
    )
    log_on_fallback: bool = Field(
        default=True,
        description="Log a warning when an observation falls back to label-only",
    )
    otlp_export: bool = Field(
        default=True,
        description="Push OpenTelemetry HTTP metrics to the collector over OTLP",
    )
    export_interval_ms: int = Field(
        default=60000,
        gt=0,
        description="Interval between OTLP metric pushes",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )
    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="Tracing settings",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Metrics settings",
    )
