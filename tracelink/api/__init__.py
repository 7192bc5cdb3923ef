"""HTTP API for Tracelink."""
