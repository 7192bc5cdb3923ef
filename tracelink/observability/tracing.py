"""OpenTelemetry distributed tracing setup and per-request span recording.

The root span of every request is opened by the FastAPI instrumentation.
Handlers open nested child spans through a SpanRecorder, which keeps the
open spans on a stack so they are always ended in LIFO order.
"""

import asyncio
import os
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer

from tracelink.errors import SpanOrderError, TelemetrySetupError
from tracelink.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_OTLP_ENDPOINT = "otel-collector:4317"
TRACER_NAME = "tracelink"


def resolve_otlp_endpoint(otlp_endpoint: str | None = None) -> str:
    """Pick the collector endpoint: explicit value, then env var, then default."""
    return otlp_endpoint or os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT") or DEFAULT_OTLP_ENDPOINT


def build_resource(service_name: str, service_version: str) -> Resource:
    """Resource shared by the tracer and meter providers."""
    return Resource.create({SERVICE_NAME: service_name, SERVICE_VERSION: service_version})


def setup_tracing(
    service_name: str = "sample-app",
    service_version: str = "1.0.0",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    export: bool = True,
) -> TracerProvider:
    """Initialize OpenTelemetry tracing.

    Args:
        service_name: Name to identify this service in traces
        service_version: Version reported on the resource
        otlp_endpoint: OTLP gRPC endpoint (e.g., "localhost:4317")
                       Falls back to OTEL_EXPORTER_OTLP_ENDPOINT env var
        console_export: Also export spans to console (for debugging)
        export: Attach the OTLP exporter at all

    Returns:
        Configured TracerProvider, also installed as the global provider

    Raises:
        TelemetrySetupError: If the resource or exporter cannot be built
    """
    try:
        provider = TracerProvider(resource=build_resource(service_name, service_version))

        if export:
            # Imported lazily so the gRPC stack only loads when exporting
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

            endpoint = resolve_otlp_endpoint(otlp_endpoint)
            provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
            )
            logger.info("tracing_exporter_configured", endpoint=endpoint)

        if console_export:
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    except Exception as e:
        raise TelemetrySetupError(f"Failed to set up tracing: {e}") from e

    trace.set_tracer_provider(provider)

    return provider


def get_tracer(provider: trace.TracerProvider | None = None) -> Tracer:
    """Get a tracer from the given provider, or from the global one.

    The global provider is a no-op until setup_tracing has run.
    """
    if provider is None:
        return trace.get_tracer(TRACER_NAME)
    return provider.get_tracer(TRACER_NAME)


def format_trace_id(trace_id: int) -> str:
    """Render a trace id as 32 lowercase hex digits."""
    return format(trace_id, "032x")


def format_span_id(span_id: int) -> str:
    """Render a span id as 16 lowercase hex digits."""
    return format(span_id, "016x")


def get_current_trace_id() -> str | None:
    """Get the current trace ID as a hex string.

    Returns:
        Trace ID or None if not in a trace
    """
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return format_trace_id(span_context.trace_id)
    return None


def get_current_span_id() -> str | None:
    """Get the current span ID as a hex string.

    Returns:
        Span ID or None if not in a span
    """
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return format_span_id(span_context.span_id)
    return None


def record_exception(span: Span, exception: BaseException, escaped: bool = True) -> None:
    """Record an exception on a span and mark it as failed."""
    span.record_exception(exception, escaped=escaped)
    span.set_status(Status(StatusCode.ERROR, str(exception)))


def set_span_attributes(span: Span, **attributes: Any) -> None:
    """Set multiple attributes on a span, skipping None values."""
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, value)


@dataclass
class SpanHandle:
    """An open child span together with the context token that activated it."""

    name: str
    span: Span
    token: object
    ended: bool = False


class SpanRecorder:
    """Opens and closes child spans for a single request.

    A recorder is created per request and never shared. Every started span
    is made current until it ends, so spans started later nest under it.
    Ending a span that is not the innermost open one raises SpanOrderError.

    If the tracer fails to start a span, the recorder hands out a no-op
    span instead and the request carries on untraced.
    """

    def __init__(self, tracer: Tracer) -> None:
        self._tracer = tracer
        self._stack: list[SpanHandle] = []
        self.started = 0
        self.ended = 0

    @property
    def depth(self) -> int:
        """Number of spans currently open."""
        return len(self._stack)

    def start_child_span(
        self,
        parent_context: Context | None,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> SpanHandle:
        """Start a span under parent_context (the current context if None).

        Args:
            parent_context: Context holding the parent span
            name: Span name
            attributes: Initial span attributes

        Returns:
            Handle to pass to end_span
        """
        try:
            span = self._tracer.start_span(
                name,
                context=parent_context,
                kind=SpanKind.INTERNAL,
                attributes=attributes or {},
            )
        except Exception as e:
            logger.warning("span_start_failed", span_name=name, error=str(e))
            span = trace.INVALID_SPAN

        token = otel_context.attach(trace.set_span_in_context(span, parent_context))
        handle = SpanHandle(name=name, span=span, token=token)
        self._stack.append(handle)
        self.started += 1
        return handle

    def end_span(self, handle: SpanHandle) -> None:
        """End the innermost open span.

        Raises:
            SpanOrderError: If handle was already ended or is not innermost
        """
        if handle.ended:
            raise SpanOrderError(f"Span '{handle.name}' was already ended")
        if not self._stack or self._stack[-1] is not handle:
            innermost = self._stack[-1].name if self._stack else None
            raise SpanOrderError(
                f"Span '{handle.name}' ended while '{innermost}' is still open"
            )

        self._stack.pop()
        handle.ended = True
        self.ended += 1
        otel_context.detach(handle.token)  # type: ignore[arg-type]
        try:
            handle.span.end()
        except Exception as e:
            logger.warning("span_end_failed", span_name=handle.name, error=str(e))

    def close_all(self, status: Status | None = None) -> None:
        """End every open span, innermost first, optionally setting a status."""
        while self._stack:
            handle = self._stack[-1]
            if status is not None:
                handle.span.set_status(status)
            self.end_span(handle)

    @contextmanager
    def child_span(
        self,
        name: str,
        parent_context: Context | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[Span, None, None]:
        """Open a child span for the duration of the with-block."""
        handle = self.start_child_span(parent_context, name, attributes)
        try:
            yield handle.span
        except asyncio.CancelledError:
            handle.span.set_status(Status(StatusCode.ERROR, "cancelled"))
            raise
        except Exception as e:
            record_exception(handle.span, e)
            raise
        finally:
            if not handle.ended:
                self.close_to(handle)

    def close_to(self, handle: SpanHandle) -> None:
        """End spans until handle itself has been ended."""
        while not handle.ended:
            self.end_span(self._stack[-1])
