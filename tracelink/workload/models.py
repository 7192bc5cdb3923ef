"""Models for the simulated /work request."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_BODY = "Work completed\n"
FAILURE_BODY = "Internal Server Error\n"


class SimulationOutcome(BaseModel):
    """Latency and outcome drawn for one request."""

    latency_ms: int = Field(ge=0)
    """Simulated duration of the work in milliseconds."""

    failed: bool
    """Whether the request fails."""

    model_config = ConfigDict(frozen=True)

    @property
    def latency_seconds(self) -> float:
        return self.latency_ms / 1000


class WorkState(str, Enum):
    """Stages a /work request moves through, strictly in this order."""

    RECEIVED = "received"
    SIMULATING = "simulating"
    RECORDING = "recording"
    RESPONDED = "responded"


class RequestContext(BaseModel):
    """Per-request identifiers and outcome.

    Created when a request enters the orchestrator and discarded once the
    response is written.
    """

    trace_id: str | None = None
    """Trace id of the root span, None when tracing is disabled."""

    span_id: str | None = None
    """Span id of the root span."""

    request_id: str = Field(default_factory=lambda: uuid4().hex)
    """Identifies the request in logs, independent of tracing."""

    method: str = "GET"
    """HTTP method, used as a metric label."""

    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    """When the request entered the orchestrator."""

    status_code: int | None = None
    """HTTP status of the outcome, set during recording."""

    latency_ms: int | None = None
    """Simulated latency, set during recording."""


class WorkResult(BaseModel):
    """What the route writes back to the client."""

    status_code: int
    body: str
    context: RequestContext
    state_history: list[WorkState] = Field(default_factory=list)
