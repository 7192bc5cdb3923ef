"""Per-request outcome logging correlated with the request's trace."""

from typing import Any

from tracelink.observability.logging import get_logger

COMPLETED_EVENT = "work_completed"
FAILED_EVENT = "work_failed"


class LogCorrelator:
    """Emits one structured log entry per request.

    The entry carries the trace and span ids of the request so a log line can
    be followed to its trace. Failed requests log at ERROR, the rest at INFO.
    """

    def __init__(self, logger: Any | None = None) -> None:
        self._logger = logger if logger is not None else get_logger("tracelink.work")

    def log_outcome(
        self,
        trace_id: str | None,
        span_id: str | None,
        latency_ms: int,
        status: int,
        request_id: str | None = None,
    ) -> None:
        """Write the outcome entry. A failing log sink drops the entry."""
        fields = {
            "request_id": request_id,
            "trace_id": trace_id,
            "span_id": span_id,
            "latency_ms": latency_ms,
            "status": status,
        }
        try:
            if status >= 500:
                self._logger.error(FAILED_EVENT, **fields)
            else:
                self._logger.info(COMPLETED_EVENT, **fields)
        except Exception:  # noqa: S110
            # The sink itself is broken, there is nowhere left to report to
            pass
