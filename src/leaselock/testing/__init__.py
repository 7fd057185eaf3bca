"""
Test utilities for leaselock.

Components:
    VirtualClock: Manually advanced clock for expiry and watchdog tests
    LockTestHarness: VirtualClock plus InMemoryStoreAdapter, with a manager factory

Note:
    This module is intended for test code only. It should not be imported
    in production code paths.
"""

from leaselock.testing.clock import VirtualClock
from leaselock.testing.harness import LockTestHarness

__all__ = [
    "VirtualClock",
    "LockTestHarness",
]
