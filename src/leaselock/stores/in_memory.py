"""
In-memory store adapter.

Useful for testing and development. Ownership only spans the tasks of a
single process, and everything is lost when it exits.
"""

import asyncio
import logging
from dataclasses import dataclass

from leaselock.clock import LeaseClock, SystemClock
from leaselock.stores.interface import StoreAdapter

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: str
    expires_at: float | None = None


class InMemoryStoreAdapter(StoreAdapter):
    """
    In-memory implementation of the store adapter.

    Expiry is evaluated lazily against the injected clock, so a
    ``VirtualClock`` lets tests move time forward without sleeping. An
    ``asyncio.Lock`` makes each primitive atomic with respect to other tasks.

    Example:
        >>> clock = VirtualClock()
        >>> store = InMemoryStoreAdapter(clock=clock)
        >>> await store.conditional_set("orders", "t1", ttl=5)
        True
        >>> await clock.advance(6)
        >>> await store.get("orders") is None
        True

    Attributes:
        operations: Names of the primitives called, in order, for assertions
    """

    def __init__(self, *, clock: LeaseClock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self.operations: list[str] = []

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock.time():
            del self._entries[key]
            logger.debug("Key expired: key=%s", key)
            return None
        return entry

    def _expiry(self, ttl: float | None) -> float | None:
        if ttl is None:
            return None
        return self._clock.time() + ttl

    async def conditional_set(self, key: str, value: str, ttl: float | None) -> bool:
        async with self._lock:
            self.operations.append("conditional_set")
            if self._live_entry(key) is not None:
                return False
            self._entries[key] = _Entry(value=value, expires_at=self._expiry(ttl))
            return True

    async def get(self, key: str) -> str | None:
        async with self._lock:
            self.operations.append("get")
            entry = self._live_entry(key)
            return entry.value if entry else None

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        async with self._lock:
            self.operations.append("compare_and_delete")
            entry = self._live_entry(key)
            if entry is None or entry.value != expected:
                return False
            del self._entries[key]
            return True

    async def compare_and_extend(self, key: str, expected: str, ttl: float) -> bool:
        async with self._lock:
            self.operations.append("compare_and_extend")
            entry = self._live_entry(key)
            if entry is None or entry.value != expected:
                return False
            entry.expires_at = self._expiry(ttl)
            return True

    async def get_set(self, key: str, value: str) -> str | None:
        async with self._lock:
            self.operations.append("get_set")
            entry = self._live_entry(key)
            self._entries[key] = _Entry(value=value)
            return entry.value if entry else None

    async def expire(self, key: str, ttl: float) -> bool:
        async with self._lock:
            self.operations.append("expire")
            entry = self._live_entry(key)
            if entry is None:
                return False
            entry.expires_at = self._expiry(ttl)
            return True

    # Out-of-band helpers for tests and diagnostics

    async def delete(self, key: str) -> bool:
        """Delete ``key`` regardless of its value, as an operator would."""
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def ttl(self, key: str) -> float | None:
        """Remaining seconds before ``key`` expires, None if absent or persistent."""
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.expires_at is None:
                return None
            return entry.expires_at - self._clock.time()

    async def keys(self) -> list[str]:
        """Live keys currently stored."""
        async with self._lock:
            return [key for key in list(self._entries) if self._live_entry(key) is not None]

    def clear(self) -> None:
        """Drop all entries and recorded operations."""
        self._entries.clear()
        self.operations.clear()
