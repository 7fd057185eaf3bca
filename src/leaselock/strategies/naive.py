"""
Naive timestamp lock.

The historical baseline, kept for comparison and documented races. Do not
use it to protect anything that matters.

The key's value is the holder's deadline in epoch milliseconds, so the
value doubles as the token and nobody can prove ownership. A holder that
finds the deadline in the past takes the key over with get-and-set. The
expiry is attached in a separate round trip, so a crash right after the
write leaves a key that never expires; the deadline check is what
eventually frees it, and only if client clocks agree.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from leaselock.clock import LeaseClock, SystemClock
from leaselock.exceptions import UnsupportedOperationError
from leaselock.stores.interface import StoreAdapter
from leaselock.strategies.interface import LockStrategy

logger = logging.getLogger(__name__)


def _parse_deadline(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class NaiveStrategy(LockStrategy):
    """
    Timestamp-valued lock with cooperative takeover of abandoned keys.

    ``try_acquire`` ignores the proposed token and returns the deadline
    string it wrote. ``renew`` and ``release`` raise
    ``UnsupportedOperationError``; let the expiry free the key.
    """

    name: ClassVar[str] = "naive"
    supports_release: ClassVar[bool] = False

    def __init__(self, store: StoreAdapter, *, clock: LeaseClock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    async def try_acquire(self, key: str, lease_seconds: float, token: str) -> str | None:
        now_ms = int(self._clock.time() * 1000)
        deadline = str(now_ms + int(lease_seconds * 1000))

        if await self._store.conditional_set(key, deadline, None):
            await self._store.expire(key, lease_seconds)
            return deadline

        current = await self._store.get(key)
        current_deadline = _parse_deadline(current)
        if current_deadline is None or current_deadline >= now_ms:
            return None

        previous = await self._store.get_set(key, deadline)
        if previous != current:
            # Another caller took the key over between our get and get_set.
            logger.debug("Lost takeover race: key=%s", key)
            return None

        logger.warning(
            "Took over abandoned lock: key=%s, stale_deadline=%s",
            key,
            current,
        )
        if not await self._store.expire(key, lease_seconds):
            logger.warning("Could not attach expiry after takeover: key=%s", key)
        return deadline

    async def renew(self, key: str, token: str, lease_seconds: float) -> bool:
        raise UnsupportedOperationError(self.name, "renew")

    async def release(self, key: str, token: str) -> bool:
        raise UnsupportedOperationError(self.name, "release")
