"""
Leased lock with watchdog renewal.

Built on the atomic strategy, but the store only ever sees a short internal
lease. A watchdog extends it while the holder runs, so a critical section
may take as long as it needs, and a crashed holder still frees the key
within one internal lease.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import ClassVar

from leaselock.clock import LeaseClock, SystemClock
from leaselock.config import LockConfig
from leaselock.observability import NullTracer, Tracer
from leaselock.stores.interface import StoreAdapter
from leaselock.strategies.atomic import AtomicNXStrategy
from leaselock.watchdog import Watchdog

logger = logging.getLogger(__name__)


class LeasedStrategy(AtomicNXStrategy):
    """
    Atomic lock whose lease is kept alive by a per-lock Watchdog.

    ``try_acquire`` ignores the caller's lease duration and writes
    ``config.watchdog_lease_seconds`` instead, then starts a watchdog that
    renews every ``config.renew_interval`` seconds.

    ``release`` stops the watchdog before touching the store. If the
    watchdog already saw the lease disappear, release returns False
    without a store round trip.

    A watchdog that observes loss drops out of the strategy on its own;
    only its (key, token) pair is kept, in a history bounded by
    ``max_lost_history``, so ``is_lost`` and ``release`` still know about it.

    Example:
        >>> strategy = LeasedStrategy(store, config=LockConfig(watchdog_lease_seconds=10))
        >>> token = await strategy.try_acquire("reindex", 10, new_token())
        >>> ...  # long running work, renewed every ~3.3s
        >>> await strategy.release("reindex", token)
    """

    name: ClassVar[str] = "leased"

    def __init__(
        self,
        store: StoreAdapter,
        *,
        config: LockConfig | None = None,
        clock: LeaseClock | None = None,
        tracer: Tracer | None = None,
        max_lost_history: int = 1000,
    ) -> None:
        super().__init__(store)
        self._config = config or LockConfig()
        self._clock = clock or SystemClock()
        self._tracer = tracer or NullTracer()
        self._watchdogs: dict[tuple[str, str], Watchdog] = {}
        self._lost: deque[tuple[str, str]] = deque(maxlen=max_lost_history)

    @property
    def lease_seconds(self) -> float:
        """Internal lease written to the store."""
        return self._config.watchdog_lease_seconds

    def watchdog_for(self, key: str, token: str) -> Watchdog | None:
        """Return the watchdog renewing ``key`` for ``token``, if any."""
        return self._watchdogs.get((key, token))

    @property
    def active_watchdogs(self) -> int:
        return sum(1 for watchdog in self._watchdogs.values() if watchdog.running)

    async def try_acquire(self, key: str, lease_seconds: float, token: str) -> str | None:
        acquired = await super().try_acquire(key, self.lease_seconds, token)
        if acquired is None:
            return None

        watchdog = Watchdog(
            self._store,
            key,
            acquired,
            self.lease_seconds,
            interval=self._config.renew_interval,
            renew_timeout=self._config.renew_timeout,
            clock=self._clock,
            on_lost=self._forget_lost,
            tracer=self._tracer,
        )
        self._watchdogs[(key, acquired)] = watchdog
        watchdog.start()
        logger.debug(
            "Started watchdog: key=%s, lease=%.3fs, interval=%.3fs",
            key,
            self.lease_seconds,
            watchdog.interval,
        )
        return acquired

    async def renew(self, key: str, token: str, lease_seconds: float) -> bool:
        renewed = await super().renew(key, token, lease_seconds)
        if not renewed:
            watchdog = self._watchdogs.get((key, token))
            if watchdog is not None:
                await watchdog.report_lost()
        return renewed

    async def release(self, key: str, token: str) -> bool:
        if (key, token) in self._lost:
            self._lost.remove((key, token))
            logger.info("Release skipped, lease already lost: key=%s", key)
            return False
        watchdog = self._watchdogs.pop((key, token), None)
        if watchdog is not None and not await watchdog.stop():
            logger.info("Release skipped, lease already lost: key=%s", key)
            return False
        return await super().release(key, token)

    def is_lost(self, key: str, token: str) -> bool:
        return (key, token) in self._lost

    def _forget_lost(self, watchdog: Watchdog) -> None:
        self._watchdogs.pop((watchdog.key, watchdog.token), None)
        self._lost.append((watchdog.key, watchdog.token))

    async def close(self) -> None:
        """Stop every watchdog without releasing; leases then lapse in the store."""
        watchdogs = list(self._watchdogs.values())
        self._watchdogs.clear()
        self._lost.clear()
        for watchdog in watchdogs:
            await watchdog.stop()
