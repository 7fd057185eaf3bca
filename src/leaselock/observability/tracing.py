"""
OpenTelemetry availability detection for leaselock.

OpenTelemetry is an optional dependency (``pip install leaselock-py[telemetry]``).
This module is the single place that attempts the import; everything else
checks ``OTEL_AVAILABLE`` or goes through ``create_tracer``.
"""

from __future__ import annotations

# Optional OpenTelemetry import - single source of truth
try:
    from opentelemetry import trace  # noqa: F401

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False


__all__ = [
    "OTEL_AVAILABLE",
]
