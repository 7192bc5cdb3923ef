"""Orchestrates a single /work request.

A request moves through RECEIVED -> SIMULATING -> RECORDING -> RESPONDED.
The root span is already open when the request arrives; the orchestrator
opens child spans around the simulated work, then logs and records the
outcome with the root span's trace id so all three signals line up.

A simulated failure is an ordinary outcome reported as HTTP 500. If the
request is cancelled while the work is pending, open child spans are
closed and nothing is logged or recorded for it.
"""

import structlog
from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from tracelink.observability.correlation import LogCorrelator
from tracelink.observability.metrics import LatencyRecorder
from tracelink.observability.tracing import (
    SpanRecorder,
    format_span_id,
    format_trace_id,
    set_span_attributes,
)
from tracelink.workload.models import (
    FAILURE_BODY,
    SUCCESS_BODY,
    RequestContext,
    SimulationOutcome,
    WorkResult,
    WorkState,
)
from tracelink.workload.simulator import Simulator, WorkPerformer

DEFAULT_CHILD_SPANS = ("simulate_work", "db_cache_lookup")

_ORDER = list(WorkState)


class WorkOrchestrator:
    """Runs the simulated workload and emits its telemetry."""

    def __init__(
        self,
        simulator: Simulator,
        performer: WorkPerformer,
        tracer: Tracer,
        latency_recorder: LatencyRecorder,
        log_correlator: LogCorrelator,
        child_span_names: tuple[str, ...] | list[str] = DEFAULT_CHILD_SPANS,
    ) -> None:
        self.simulator = simulator
        self.performer = performer
        self.tracer = tracer
        self.latency_recorder = latency_recorder
        self.log_correlator = log_correlator
        self.child_span_names = tuple(child_span_names)

    async def handle(self, method: str = "GET") -> WorkResult:
        """Process one request and return the response to write.

        Args:
            method: HTTP method of the request, used as a metric label

        Returns:
            Status code, body and the request context
        """
        history: list[WorkState] = []

        self._advance(history, WorkState.RECEIVED)
        root_span = trace.get_current_span()
        root_context = root_span.get_span_context()
        context = RequestContext(method=method)
        if root_context.is_valid:
            context.trace_id = format_trace_id(root_context.trace_id)
            context.span_id = format_span_id(root_context.span_id)

        # Every log emitted while the request runs carries its request_id
        with structlog.contextvars.bound_contextvars(request_id=context.request_id):
            return await self._process(history, root_span, context)

    async def _process(
        self,
        history: list[WorkState],
        root_span: Span,
        context: RequestContext,
    ) -> WorkResult:
        self._advance(history, WorkState.SIMULATING)
        outcome = self.simulator.simulate()
        await self._simulate(outcome)

        self._advance(history, WorkState.RECORDING)
        status_code = 500 if outcome.failed else 200
        context.status_code = status_code
        context.latency_ms = outcome.latency_ms

        set_span_attributes(
            root_span,
            **{"work.latency_ms": outcome.latency_ms, "work.failed": outcome.failed},
        )
        if outcome.failed:
            root_span.set_status(Status(StatusCode.ERROR, "simulated failure"))

        self.log_correlator.log_outcome(
            trace_id=context.trace_id,
            span_id=context.span_id,
            latency_ms=outcome.latency_ms,
            status=status_code,
            request_id=context.request_id,
        )
        self.latency_recorder.observe(
            outcome.latency_seconds,
            method=context.method,
            status=str(status_code),
            trace_id=context.trace_id,
        )

        self._advance(history, WorkState.RESPONDED)
        return WorkResult(
            status_code=status_code,
            body=FAILURE_BODY if outcome.failed else SUCCESS_BODY,
            context=context,
            state_history=history,
        )

    async def _simulate(self, outcome: SimulationOutcome) -> None:
        """Await the performer inside each child span in turn."""
        if not self.child_span_names:
            await self.performer.perform(outcome.latency_seconds)
            return

        recorder = SpanRecorder(self.tracer)
        share = outcome.latency_seconds / len(self.child_span_names)
        for name in self.child_span_names:
            with recorder.child_span(name, attributes={"work.simulated_seconds": share}):
                await self.performer.perform(share)

    @staticmethod
    def _advance(history: list[WorkState], state: WorkState) -> None:
        expected = _ORDER[len(history)]
        if state is not expected:
            raise RuntimeError(f"Invalid transition to {state.value}, expected {expected.value}")
        history.append(state)
