"""
Caller-facing lock manager.

The manager turns the strategies' boolean outcomes into the library's
exceptions, generates tokens, runs the blocking-acquire retry loop and
keeps an advisory record of the leases it handed out.

Usage:
    >>> store = RedisStoreAdapter(RedisStoreConfig(redis_url="redis://localhost:6379"))
    >>> await store.connect()
    >>> manager = LockManager(store, strategy="leased")
    >>>
    >>> async with manager.lock("reindex:products", wait_timeout=5.0):
    ...     # Critical section - only one holder at a time
    ...     await reindex_products()
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from leaselock.clock import LeaseClock, SystemClock
from leaselock.config import LockConfig
from leaselock.exceptions import (
    LeaseLockError,
    LockLostError,
    LockTimeoutError,
    LockUnavailableError,
)
from leaselock.lease import Lease, LockState, new_token, validate_key, validate_lease
from leaselock.observability import (
    ATTR_LOCK_ACQUIRED,
    ATTR_LOCK_ATTEMPTS,
    ATTR_LOCK_KEY,
    ATTR_LOCK_LEASE_SECONDS,
    ATTR_LOCK_RELEASED,
    ATTR_LOCK_RENEWED,
    ATTR_LOCK_STRATEGY,
    ATTR_LOCK_TIMEOUT,
    Tracer,
    create_tracer,
)
from leaselock.retry import calculate_backoff
from leaselock.stores.interface import StoreAdapter
from leaselock.strategies import (
    STRATEGY_NAMES,
    AtomicNXStrategy,
    LeasedStrategy,
    LockStrategy,
    NaiveStrategy,
)

logger = logging.getLogger(__name__)


class LockManager:
    """
    Acquires, renews and releases distributed locks through one strategy.

    The store is the only authority on ownership. Everything the manager
    remembers locally (``held_locks``, watchdog state) is an advisory cache;
    ``renew`` and ``release`` always ask the store.

    Example:
        >>> manager = LockManager(store)
        >>>
        >>> lease = await manager.acquire("orders:42", 30)
        >>> try:
        ...     await process_order(42)
        ... finally:
        ...     await manager.release(lease.key, lease.token)
        >>>
        >>> # Blocking with timeout
        >>> try:
        ...     async with manager.lock("orders:42", 30, wait_timeout=5.0):
        ...         await process_order(42)
        ... except LockTimeoutError:
        ...     print("Another worker is processing order 42")
    """

    def __init__(
        self,
        store: StoreAdapter,
        strategy: LockStrategy | str = "atomic",
        *,
        config: LockConfig | None = None,
        clock: LeaseClock | None = None,
        holder_id: str | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        """
        Initialize the lock manager.

        Args:
            store: Adapter for the key-value store holding the locks
            strategy: Strategy instance, or one of "naive", "atomic", "leased"
            config: Lease, watchdog and backoff settings
            clock: Time source; tests pass a VirtualClock
            holder_id: Optional identifier for this lock holder (for debugging)
            tracer: Optional custom Tracer instance. If not provided, one is
                   created based on config.enable_tracing.
        """
        self._store = store
        self._config = config or LockConfig()
        self._clock = clock or SystemClock()
        self._holder_id = holder_id
        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)
        self._strategy = (
            self._build_strategy(strategy) if isinstance(strategy, str) else strategy
        )
        self._held_locks: dict[tuple[str, str], Lease] = {}

    def _build_strategy(self, name: str) -> LockStrategy:
        if name == NaiveStrategy.name:
            return NaiveStrategy(self._store, clock=self._clock)
        if name == AtomicNXStrategy.name:
            return AtomicNXStrategy(self._store)
        if name == LeasedStrategy.name:
            return LeasedStrategy(
                self._store,
                config=self._config,
                clock=self._clock,
                tracer=self._tracer,
            )
        raise ValueError(
            f"Unknown lock strategy: {name!r}. Expected one of: {', '.join(STRATEGY_NAMES)}"
        )

    @property
    def strategy(self) -> LockStrategy:
        return self._strategy

    @property
    def config(self) -> LockConfig:
        return self._config

    @property
    def held_locks(self) -> list[Lease]:
        """Leases acquired through this manager, not released and not known lost."""
        self._forget_lost_leases()
        return list(self._held_locks.values())

    @property
    def held_lock_count(self) -> int:
        self._forget_lost_leases()
        return len(self._held_locks)

    def _forget_lost_leases(self) -> None:
        for key, token in list(self._held_locks):
            if self._strategy.is_lost(key, token):
                del self._held_locks[(key, token)]

    async def acquire(
        self,
        key: str,
        lease_seconds: float | None = None,
        *,
        wait_timeout: float | None = None,
        token: str | None = None,
    ) -> Lease:
        """
        Acquire a lock.

        Args:
            key: String key identifying the lock (e.g., "orders:42")
            lease_seconds: Lease duration (default: config.default_lease_seconds)
            wait_timeout: None for a single attempt; otherwise seconds to keep
                retrying with backoff before giving up
            token: Ownership token to use (default: a fresh random token)

        Returns:
            Lease with the owning token

        Raises:
            LockUnavailableError: Single attempt found the key held
            LockTimeoutError: Retries did not succeed within wait_timeout
            StoreUnavailableError: The store failed; never retried
        """
        validate_key(key)
        lease_seconds = validate_lease(
            lease_seconds if lease_seconds is not None else self._config.default_lease_seconds
        )
        if wait_timeout is not None and wait_timeout < 0:
            raise ValueError(f"wait_timeout must be >= 0, got {wait_timeout}")
        token = token or new_token()

        with self._tracer.span(
            "leaselock.lock.acquire",
            {
                ATTR_LOCK_KEY: key,
                ATTR_LOCK_STRATEGY: self._strategy.name,
                ATTR_LOCK_LEASE_SECONDS: lease_seconds,
                ATTR_LOCK_TIMEOUT: wait_timeout if wait_timeout is not None else -1,
            },
        ) as span:
            owner, attempts = await self._acquire_with_retry(
                key, lease_seconds, token, wait_timeout
            )
            if span is not None:
                span.set_attribute(ATTR_LOCK_ACQUIRED, owner is not None)
                span.set_attribute(ATTR_LOCK_ATTEMPTS, attempts)

        if owner is None:
            if wait_timeout is None:
                raise LockUnavailableError(key)
            raise LockTimeoutError(key, wait_timeout, attempts)

        lease = Lease(
            key=key,
            token=owner,
            strategy=self._strategy.name,
            lease_seconds=lease_seconds,
            acquired_at=datetime.now(UTC),
            holder_id=self._holder_id,
        )
        self._forget_lost_leases()
        self._held_locks[(key, owner)] = lease
        logger.debug(
            "Acquired lock: key=%s, strategy=%s, attempts=%d",
            key,
            self._strategy.name,
            attempts,
        )
        return lease

    async def _acquire_with_retry(
        self,
        key: str,
        lease_seconds: float,
        token: str,
        wait_timeout: float | None,
    ) -> tuple[str | None, int]:
        """Return the owning token (or None) and the number of attempts."""
        owner = await self._strategy.try_acquire(key, lease_seconds, token)
        attempts = 1
        if owner is not None or wait_timeout is None:
            return owner, attempts

        deadline = self._clock.monotonic() + wait_timeout
        while True:
            remaining = deadline - self._clock.monotonic()
            if remaining <= 0:
                return None, attempts

            delay = calculate_backoff(attempts - 1, self._config.backoff)
            await self._clock.sleep(min(delay, remaining))

            owner = await self._strategy.try_acquire(key, lease_seconds, token)
            attempts += 1
            if owner is not None:
                return owner, attempts

    async def renew(self, key: str, token: str, lease_seconds: float | None = None) -> None:
        """
        Extend a held lease.

        Args:
            key: Lock key
            token: Token returned by acquire
            lease_seconds: New lease duration (default: config.default_lease_seconds)

        Raises:
            LockLostError: The token no longer owns the key
            UnsupportedOperationError: The strategy cannot renew
        """
        validate_key(key)
        lease_seconds = validate_lease(
            lease_seconds if lease_seconds is not None else self._config.default_lease_seconds
        )

        with self._tracer.span(
            "leaselock.lock.renew",
            {
                ATTR_LOCK_KEY: key,
                ATTR_LOCK_STRATEGY: self._strategy.name,
                ATTR_LOCK_LEASE_SECONDS: lease_seconds,
            },
        ) as span:
            renewed = await self._strategy.renew(key, token, lease_seconds)
            if span is not None:
                span.set_attribute(ATTR_LOCK_RENEWED, renewed)

        if not renewed:
            self._held_locks.pop((key, token), None)
            raise LockLostError(key, token)
        logger.debug("Renewed lock: key=%s, lease=%.3fs", key, lease_seconds)

    async def release(self, key: str, token: str) -> None:
        """
        Release a held lock.

        Never retried. Releasing a lock that already expired, was taken by
        another token, or was released before raises LockLostError.

        Raises:
            LockLostError: The token no longer owns the key
            UnsupportedOperationError: The strategy cannot release
        """
        validate_key(key)

        try:
            with self._tracer.span(
                "leaselock.lock.release",
                {
                    ATTR_LOCK_KEY: key,
                    ATTR_LOCK_STRATEGY: self._strategy.name,
                },
            ) as span:
                released = await self._strategy.release(key, token)
                if span is not None:
                    span.set_attribute(ATTR_LOCK_RELEASED, released)
        finally:
            self._held_locks.pop((key, token), None)
        if not released:
            raise LockLostError(key, token)
        logger.debug("Released lock: key=%s", key)

    async def state(self, key: str) -> LockState:
        """
        Ask the store whether any token currently owns ``key``.

        The answer may be stale by the time the caller acts on it; use
        ``acquire`` to take the lock, never a check followed by a write.

        Example:
            >>> if await manager.state("reindex") is LockState.HELD:
            ...     print("Reindex already running")
        """
        validate_key(key)
        value = await self._store.get(key)
        return LockState.HELD if value is not None else LockState.UNLOCKED

    def ensure_held(self, lease: Lease) -> None:
        """
        Raise if this process already knows the lease is gone.

        Only the leased strategy's watchdog can know this without a store
        round trip. A clean result is not proof of ownership.

        Raises:
            LockLostError: The watchdog observed loss of the lease
        """
        if self._strategy.is_lost(lease.key, lease.token):
            raise LockLostError(lease.key, lease.token)

    @asynccontextmanager
    async def lock(
        self,
        key: str,
        lease_seconds: float | None = None,
        *,
        wait_timeout: float | None = None,
    ) -> AsyncIterator[Lease]:
        """
        Hold a lock for the duration of a ``async with`` block.

        If the block completes and the release finds the lock already lost,
        LockLostError is raised so the caller learns its critical section ran
        unprotected. If the block itself raised, that exception propagates
        and any release failure is only logged.

        Strategies that cannot release (naive) leave the key to expire.

        Raises:
            LockUnavailableError: Single attempt found the key held
            LockTimeoutError: Retries did not succeed within wait_timeout
            LockLostError: The lease was lost before the block finished
        """
        lease = await self.acquire(key, lease_seconds, wait_timeout=wait_timeout)
        if not self._strategy.supports_release:
            try:
                yield lease
            finally:
                self._held_locks.pop((lease.key, lease.token), None)
                logger.debug(
                    "Leaving lock to expire, %s strategy cannot release: key=%s",
                    self._strategy.name,
                    key,
                )
            return

        try:
            yield lease
        except BaseException:
            try:
                await self.release(lease.key, lease.token)
            except LockLostError:
                logger.warning("Lock was lost before the failing block exited: key=%s", key)
            except LeaseLockError as e:
                logger.warning(
                    "Release failed after the block raised: key=%s, error=%s", key, e
                )
            raise
        await self.release(lease.key, lease.token)

    async def release_all(self) -> int:
        """
        Release every lease acquired through this manager.

        Useful for cleanup on shutdown. Failures are logged, not raised.

        Returns:
            Number of locks actually released
        """
        released = 0
        for lease in list(self._held_locks.values()):
            try:
                await self.release(lease.key, lease.token)
                released += 1
            except LockLostError:
                logger.info("Lock already lost during release_all: key=%s", lease.key)
            except Exception as e:
                logger.warning(
                    "Error releasing lock during release_all: key=%s, error=%s",
                    lease.key,
                    e,
                )
        return released

    async def close(self) -> None:
        """Stop background renewal. Does not release locks or close the store."""
        await self._strategy.close()


__all__ = [
    "LockManager",
]
