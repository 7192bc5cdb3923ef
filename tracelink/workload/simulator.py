"""Latency and failure simulation for the /work endpoint.

Drawing an outcome and spending the time are separate collaborators: a
Simulator decides how long the request takes and whether it fails, a
WorkPerformer is awaited for that long. Tests swap either one out.
"""

import asyncio
import random
from typing import Protocol

from tracelink.workload.models import SimulationOutcome

DEFAULT_MAX_LATENCY_MS = 400
DEFAULT_FAILURE_RATE = 0.2


class Simulator(Protocol):
    """Produces the latency and outcome of one request."""

    def simulate(self) -> SimulationOutcome:
        """Draw an outcome. Never raises."""
        ...


class WorkPerformer(Protocol):
    """Stands in for the external work a real request would wait on."""

    async def perform(self, seconds: float) -> None:
        """Spend `seconds` without blocking other requests."""
        ...


class RandomSimulator:
    """Draws latency uniformly in [0, max_latency_ms) and fails with failure_rate.

    The random source is injected so runs can be made reproducible.
    """

    def __init__(
        self,
        max_latency_ms: int = DEFAULT_MAX_LATENCY_MS,
        failure_rate: float = DEFAULT_FAILURE_RATE,
        rng: random.Random | None = None,
    ) -> None:
        if max_latency_ms <= 0:
            raise ValueError("max_latency_ms must be positive")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")
        self.max_latency_ms = max_latency_ms
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()

    def simulate(self) -> SimulationOutcome:
        latency_ms = self._rng.randrange(self.max_latency_ms)
        failed = self._rng.random() < self.failure_rate
        return SimulationOutcome(latency_ms=latency_ms, failed=failed)


class FixedSimulator:
    """Always returns the same outcome."""

    def __init__(self, outcome: SimulationOutcome) -> None:
        self.outcome = outcome

    def simulate(self) -> SimulationOutcome:
        return self.outcome


class SleepWorkPerformer:
    """Waits with asyncio.sleep, suspending only the calling request."""

    async def perform(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class NoDelayWorkPerformer:
    """Returns immediately. Used when the delay itself is irrelevant."""

    async def perform(self, seconds: float) -> None:  # noqa: ARG002
        return None
