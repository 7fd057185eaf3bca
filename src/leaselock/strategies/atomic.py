"""
Atomic set-if-absent lock.

The token and its expiry are written by one store primitive, and release
and renew are compare-then-act primitives evaluated inside the store. A
late release from a holder whose lease already expired therefore cannot
delete a lock someone else has since acquired.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from leaselock.stores.interface import StoreAdapter
from leaselock.strategies.interface import LockStrategy

logger = logging.getLogger(__name__)


class AtomicNXStrategy(LockStrategy):
    """
    Minimum viable safe lock.

    There is no takeover path. A crashed holder blocks the key only until
    its expiry lapses.
    """

    name: ClassVar[str] = "atomic"

    def __init__(self, store: StoreAdapter) -> None:
        self._store = store

    @property
    def store(self) -> StoreAdapter:
        return self._store

    async def try_acquire(self, key: str, lease_seconds: float, token: str) -> str | None:
        if await self._store.conditional_set(key, token, lease_seconds):
            return token
        return None

    async def renew(self, key: str, token: str, lease_seconds: float) -> bool:
        return await self._store.compare_and_extend(key, token, lease_seconds)

    async def release(self, key: str, token: str) -> bool:
        released = await self._store.compare_and_delete(key, token)
        if not released:
            logger.debug("Stale release ignored by store: key=%s", key)
        return released
