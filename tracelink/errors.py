"""Exception hierarchy for Tracelink.

Only programming and startup errors are exceptions. A simulated request
failure is a normal outcome and is never raised.
"""


class TracelinkError(Exception):
    """Base exception for all Tracelink errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SpanOrderError(TracelinkError):
    """Raised when spans are ended out of LIFO order or ended twice."""


class TelemetrySetupError(TracelinkError):
    """Raised when a telemetry provider or exporter cannot be built at startup."""
