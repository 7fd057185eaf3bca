"""
Lease clock abstraction.

All time the protocol looks at goes through a LeaseClock, so tests can
substitute virtual time (see ``leaselock.testing.VirtualClock``).
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class LeaseClock(Protocol):
    """
    Source of time for lease bookkeeping.

    ``time()`` is wall-clock seconds since the epoch; it stamps deadlines
    that other processes read (naive strategy) and drives in-memory expiry.
    ``monotonic()`` measures local wait budgets. ``sleep()`` suspends the
    calling task.
    """

    def time(self) -> float: ...

    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """LeaseClock backed by the real system clocks and asyncio.sleep."""

    def time(self) -> float:
        return time.time()

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))


__all__ = [
    "LeaseClock",
    "SystemClock",
]
