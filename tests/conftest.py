"""
Shared pytest fixtures for the leaselock tests.

This module provides:
- Virtual time (clock)
- In-memory store sharing that clock (store)
- A harness that creates lock managers bound to one store (harness)
- Failure-injecting store variants (flaky_store, broken_store)
- A tracer that records spans (mock_tracer)

All unit tests run on virtual time, so nothing here sleeps for real.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from leaselock.config import LockConfig
from leaselock.exceptions import StoreUnavailableError
from leaselock.observability import MockTracer
from leaselock.stores.in_memory import InMemoryStoreAdapter
from leaselock.testing import LockTestHarness, VirtualClock

# =============================================================================
# Failure-injecting stores
# =============================================================================


class FlakyStore(InMemoryStoreAdapter):
    """In-memory store whose compare_and_extend fails a number of times first."""

    def __init__(self, *, failures: int = 1, **kwargs) -> None:
        super().__init__(**kwargs)
        self.remaining_failures = failures

    async def compare_and_extend(self, key: str, expected: str, ttl: float) -> bool:
        if self.remaining_failures > 0:
            self.remaining_failures -= 1
            self.operations.append("compare_and_extend")
            raise StoreUnavailableError("compare_and_extend", key, "connection reset")
        return await super().compare_and_extend(key, expected, ttl)


class BrokenStore(InMemoryStoreAdapter):
    """In-memory store whose conditional_set always fails."""

    async def conditional_set(self, key: str, value: str, ttl: float | None) -> bool:
        self.operations.append("conditional_set")
        raise StoreUnavailableError("conditional_set", key, "connection refused")


# =============================================================================
# Time and store fixtures
# =============================================================================


@pytest.fixture
def clock() -> VirtualClock:
    """Provide a fresh virtual clock."""
    return VirtualClock()


@pytest.fixture
def store(clock: VirtualClock) -> InMemoryStoreAdapter:
    """Provide an empty in-memory store driven by the virtual clock."""
    return InMemoryStoreAdapter(clock=clock)


@pytest.fixture
def leased_config() -> LockConfig:
    """
    Config with a 3 second internal lease, renewed every second.

    Short enough that tests can cover many renewal rounds in a few
    virtual seconds.
    """
    return LockConfig(
        default_lease_seconds=30.0,
        watchdog_lease_seconds=3.0,
        renew_timeout=1.0,
        enable_tracing=False,
    )


@pytest_asyncio.fixture
async def harness(clock: VirtualClock) -> AsyncGenerator[LockTestHarness, None]:
    """
    Provide a lock test harness.

    Watchdogs started through managers of the harness are stopped on teardown.
    """
    h = LockTestHarness(clock=clock)
    yield h
    await h.close()


@pytest.fixture
def mock_tracer() -> MockTracer:
    """Provide a tracer that records span names and attributes."""
    return MockTracer()


@pytest.fixture
def flaky_store(clock: VirtualClock) -> FlakyStore:
    """Store whose next compare_and_extend fails; set remaining_failures for more."""
    return FlakyStore(clock=clock, failures=1)


@pytest.fixture
def broken_store(clock: VirtualClock) -> BrokenStore:
    """Store that cannot take any lock."""
    return BrokenStore(clock=clock)
