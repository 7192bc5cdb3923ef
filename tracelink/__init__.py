"""Tracelink: a demo HTTP service emitting correlated traces, metrics and logs."""

__version__ = "1.0.0"
