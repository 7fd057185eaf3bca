"""
Tracers handed to lock components.

The manager, strategies and watchdogs never import OpenTelemetry
themselves; they receive a Tracer and open spans through it:

    >>> tracer = create_tracer(__name__, enable_tracing=True)
    >>> with tracer.span("leaselock.lock.acquire", {"leaselock.lock.key": "orders:42"}) as span:
    ...     if span is not None:
    ...         span.set_attribute("leaselock.lock.acquired", True)
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from opentelemetry.trace import Span

from leaselock.observability.tracing import OTEL_AVAILABLE


@runtime_checkable
class Tracer(Protocol):
    """
    Anything that can open a span around a lock operation.

    ``span`` yields the live span, or None when nothing is recorded, so
    callers guard attribute writes with ``if span is not None``.
    """

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Span | None]: ...

    @property
    def enabled(self) -> bool:
        """True when spans are actually recorded."""
        ...


class NullTracer:
    """Tracer used when tracing is off; every span is None."""

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[None, None, None]:
        yield None

    @property
    def enabled(self) -> bool:
        return False


class OpenTelemetryTracer:
    """
    Opens spans on the global OpenTelemetry tracer provider.

    Raises ImportError on construction when opentelemetry-api is missing;
    use ``create_tracer`` to fall back to NullTracer instead.
    """

    def __init__(self, tracer_name: str) -> None:
        from opentelemetry import trace

        self._tracer = trace.get_tracer(tracer_name)

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Span | None]:
        return self._tracer.start_as_current_span(
            name,
            attributes=attributes or {},
        )

    @property
    def enabled(self) -> bool:
        return True


class MockTracer:
    """
    Records (name, attributes) for every span, for assertions in tests.

    Yields None like NullTracer but reports ``enabled`` so attribute
    dictionaries are still built.
    """

    def __init__(self) -> None:
        self.spans: list[tuple[str, dict[str, Any] | None]] = []

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[None, None, None]:
        self.spans.append((name, attributes))
        yield None

    @property
    def enabled(self) -> bool:
        return True

    @property
    def span_names(self) -> list[str]:
        return [name for name, _ in self.spans]

    def clear(self) -> None:
        self.spans.clear()


def create_tracer(
    name: str,
    enable_tracing: bool = True,
) -> Tracer:
    """Return an OpenTelemetryTracer when enabled and installed, else a NullTracer."""
    if enable_tracing and OTEL_AVAILABLE:
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
]
