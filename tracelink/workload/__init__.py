"""Simulated workload: latency/failure simulation and request orchestration."""

from tracelink.workload.models import (
    FAILURE_BODY,
    SUCCESS_BODY,
    RequestContext,
    SimulationOutcome,
    WorkResult,
    WorkState,
)
from tracelink.workload.orchestrator import WorkOrchestrator
from tracelink.workload.simulator import (
    FixedSimulator,
    NoDelayWorkPerformer,
    RandomSimulator,
    SleepWorkPerformer,
)

__all__ = [
    "FAILURE_BODY",
    "SUCCESS_BODY",
    "FixedSimulator",
    "NoDelayWorkPerformer",
    "RandomSimulator",
    "RequestContext",
    "SimulationOutcome",
    "SleepWorkPerformer",
    "WorkOrchestrator",
    "WorkResult",
    "WorkState",
]
