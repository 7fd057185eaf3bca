"""
Observability utilities for leaselock.

Provides the composition-based tracer used by the lock manager, strategies
and watchdog, plus the standard span attribute names.

Note:
    OpenTelemetry is an optional dependency. All utilities in this module
    handle the case where OpenTelemetry is not installed by falling back to
    a no-op tracer.
"""

from leaselock.observability.attributes import (
    ATTR_ERROR_TYPE,
    ATTR_LOCK_ACQUIRED,
    ATTR_LOCK_ATTEMPTS,
    ATTR_LOCK_KEY,
    ATTR_LOCK_LEASE_SECONDS,
    ATTR_LOCK_RELEASED,
    ATTR_LOCK_RENEWED,
    ATTR_LOCK_STRATEGY,
    ATTR_LOCK_TIMEOUT,
)
from leaselock.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)
from leaselock.observability.tracing import OTEL_AVAILABLE

__all__ = [
    "OTEL_AVAILABLE",
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    "ATTR_LOCK_KEY",
    "ATTR_LOCK_STRATEGY",
    "ATTR_LOCK_LEASE_SECONDS",
    "ATTR_LOCK_TIMEOUT",
    "ATTR_LOCK_ACQUIRED",
    "ATTR_LOCK_ATTEMPTS",
    "ATTR_LOCK_RELEASED",
    "ATTR_LOCK_RENEWED",
    "ATTR_ERROR_TYPE",
]
