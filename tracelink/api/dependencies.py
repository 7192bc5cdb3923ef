"""Dependency injection for API routes.

The pipeline objects are built once by create_app and kept on app.state.
Tests override these dependencies or pass their own objects to create_app.
"""

from typing import Annotated

from fastapi import Depends, Request

from tracelink.config import Settings
from tracelink.observability.metrics import MetricsRegistry
from tracelink.workload.orchestrator import WorkOrchestrator


def get_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_orchestrator(request: Request) -> WorkOrchestrator:
    """Orchestrator handling /work requests."""
    return request.app.state.orchestrator  # type: ignore[no-any-return]


def get_metrics_registry(request: Request) -> MetricsRegistry:
    """Registry rendered by /metrics."""
    return request.app.state.metrics  # type: ignore[no-any-return]


SettingsDep = Annotated[Settings, Depends(get_settings)]
OrchestratorDep = Annotated[WorkOrchestrator, Depends(get_orchestrator)]
MetricsDep = Annotated[MetricsRegistry, Depends(get_metrics_registry)]
