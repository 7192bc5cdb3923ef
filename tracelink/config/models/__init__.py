"""Configuration section models."""

from tracelink.config.models.api import APIConfig
from tracelink.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from tracelink.config.models.workload import WorkloadConfig

__all__ = [
    "APIConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "TracingConfig",
    "WorkloadConfig",
]
