"""Builds the request pipeline from configuration.

Example usage:

    from tracelink.bootstrap import build_orchestrator
    from tracelink.config import get_settings
    from tracelink.observability.metrics import MetricsRegistry
    from tracelink.observability.tracing import get_tracer

    metrics = MetricsRegistry()
    orchestrator = build_orchestrator(get_settings(), get_tracer(), metrics)
    result = await orchestrator.handle()
"""

import random
from typing import Any

from opentelemetry.trace import Tracer

from tracelink.config.models.workload import WorkloadConfig
from tracelink.config.settings import Settings
from tracelink.observability.correlation import LogCorrelator
from tracelink.observability.logging import get_logger
from tracelink.observability.metrics import MetricsRegistry, create_latency_recorder
from tracelink.workload.models import SimulationOutcome
from tracelink.workload.orchestrator import WorkOrchestrator
from tracelink.workload.simulator import (
    FixedSimulator,
    RandomSimulator,
    Simulator,
    SleepWorkPerformer,
    WorkPerformer,
)

logger = get_logger(__name__)


def build_simulator(config: WorkloadConfig, rng: random.Random | None = None) -> Simulator:
    """Create the simulator selected by the workload configuration."""
    if config.simulator == "fixed":
        return FixedSimulator(
            SimulationOutcome(latency_ms=config.fixed_latency_ms, failed=config.fixed_failed)
        )
    return RandomSimulator(
        max_latency_ms=config.max_latency_ms,
        failure_rate=config.failure_rate,
        rng=rng or random.Random(config.seed),
    )


def build_orchestrator(
    settings: Settings,
    tracer: Tracer,
    metrics: MetricsRegistry,
    *,
    simulator: Simulator | None = None,
    performer: WorkPerformer | None = None,
    log_sink: Any | None = None,
) -> WorkOrchestrator:
    """Wire simulator, recorders and correlator into an orchestrator.

    Args:
        settings: Loaded settings
        tracer: Tracer used for child spans
        metrics: Registry holding the latency histogram
        simulator: Replaces the configured simulator
        performer: Replaces the asyncio.sleep performer
        log_sink: Replaces the structlog logger used for outcome entries

    Returns:
        Ready-to-use WorkOrchestrator
    """
    metrics_config = settings.observability.metrics
    recorder = create_latency_recorder(
        metrics,
        exemplars_enabled=metrics_config.exemplars_enabled,
        log_on_fallback=metrics_config.log_on_fallback,
    )

    orchestrator = WorkOrchestrator(
        simulator=simulator or build_simulator(settings.workload),
        performer=performer or SleepWorkPerformer(),
        tracer=tracer,
        latency_recorder=recorder,
        log_correlator=LogCorrelator(log_sink),
        child_span_names=settings.workload.child_spans,
    )

    logger.debug(
        "orchestrator_built",
        simulator=settings.workload.simulator,
        exemplars=recorder.supports_exemplars,
        child_spans=list(orchestrator.child_span_names),
    )

    return orchestrator
