"""
Background lease renewal.

A Watchdog keeps one held lease alive by extending it at a fraction of the
lease duration, for as long as the owning process runs and nobody stops it.

Ownership is tracked by a single flag. ``stop()`` clears it and the renewal
loop checks it with no ``await`` in between, so on the event loop the
check-and-clear is atomic: once ``stop()`` has returned, no renewal that
started afterwards can reach the store.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from leaselock.clock import LeaseClock, SystemClock
from leaselock.exceptions import StoreUnavailableError
from leaselock.observability import (
    ATTR_ERROR_TYPE,
    ATTR_LOCK_KEY,
    ATTR_LOCK_LEASE_SECONDS,
    ATTR_LOCK_RENEWED,
    NullTracer,
    Tracer,
)
from leaselock.stores.interface import StoreAdapter

logger = logging.getLogger(__name__)


class Watchdog:
    """
    Renews one lease in the background until stopped or ownership is lost.

    Every ``interval`` seconds the watchdog calls ``compare_and_extend`` with
    a per-call timeout. If the store reports that the token no longer owns the
    key, the watchdog marks the lease lost, invokes ``on_lost`` and exits; no
    further renewals follow. Store errors and timeouts are logged and retried
    on the next tick, and a persistent outage lets the lease lapse in the
    store on its own. Any other exception from the store is treated as loss,
    since the watchdog can no longer vouch for the lease.

    Example:
        >>> watchdog = Watchdog(store, "orders:42", token, lease_seconds=30.0)
        >>> watchdog.start()
        >>> ...
        >>> still_owned = await watchdog.stop()
    """

    def __init__(
        self,
        store: StoreAdapter,
        key: str,
        token: str,
        lease_seconds: float,
        *,
        interval: float | None = None,
        renew_timeout: float = 2.0,
        clock: LeaseClock | None = None,
        on_lost: Callable[[Watchdog], None] | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        """
        Args:
            store: Store holding the lease
            key: Lock key
            token: Token that owns the key
            lease_seconds: Expiry to re-apply on each renewal
            interval: Seconds between renewals (default: a third of the lease)
            renew_timeout: Timeout in seconds for a single renewal call
            clock: Clock used for sleeping between renewals
            on_lost: Called once when the watchdog gives up the lease as lost
            tracer: Tracer for renewal spans
        """
        if lease_seconds <= 0:
            raise ValueError(f"lease_seconds must be positive, got {lease_seconds}")
        self._store = store
        self._key = key
        self._token = token
        self._lease_seconds = lease_seconds
        self._interval = interval if interval is not None else lease_seconds / 3
        if not 0 < self._interval < lease_seconds:
            raise ValueError(
                f"interval must be between 0 and lease_seconds ({lease_seconds}), "
                f"got {self._interval}"
            )
        self._renew_timeout = renew_timeout
        self._clock = clock or SystemClock()
        self._on_lost = on_lost
        self._tracer = tracer or NullTracer()

        self._owned = True
        self._lost = False
        self._task: asyncio.Task[None] | None = None
        self.renewal_count = 0
        self.failed_attempts = 0

    @property
    def key(self) -> str:
        return self._key

    @property
    def token(self) -> str:
        return self._token

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def owned(self) -> bool:
        """Advisory: True until the watchdog is stopped or observes loss."""
        return self._owned

    @property
    def lost(self) -> bool:
        """True once a renewal reported that the token no longer owns the key."""
        return self._lost

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the renewal task on the running event loop."""
        if self.running:
            return
        if not self._owned:
            raise RuntimeError(f"Watchdog for '{self._key}' was already stopped")
        self._task = asyncio.create_task(self._run(), name=f"leaselock-watchdog:{self._key}")

    async def stop(self) -> bool:
        """
        Stop renewing.

        Returns:
            True if the watchdog still considered the lease owned, False if it
            had already observed loss or was stopped before
        """
        was_owned = self._owned
        self._owned = False
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        return was_owned

    async def report_lost(self) -> None:
        """Record a loss observed outside the renewal loop, then stop."""
        if self._owned:
            self._mark_lost()
        await self.stop()

    async def _run(self) -> None:
        while True:
            await self._clock.sleep(self._interval)
            if not self._owned:
                return
            try:
                renewed = await self._renew_once()
            except Exception:
                logger.exception("Watchdog renewal raised unexpectedly: key=%s", self._key)
                renewed = False
            if renewed is False and self._owned:
                self._mark_lost()
                return

    async def _renew_once(self) -> bool | None:
        """Renew once; None means the attempt could not reach a verdict."""
        with self._tracer.span(
            "leaselock.watchdog.renew",
            {
                ATTR_LOCK_KEY: self._key,
                ATTR_LOCK_LEASE_SECONDS: self._lease_seconds,
            },
        ) as span:
            try:
                renewed = await asyncio.wait_for(
                    self._store.compare_and_extend(self._key, self._token, self._lease_seconds),
                    timeout=self._renew_timeout,
                )
            except (asyncio.TimeoutError, StoreUnavailableError) as e:
                self.failed_attempts += 1
                if span is not None:
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                logger.warning(
                    "Watchdog renewal failed, retrying next tick: key=%s, error=%s",
                    self._key,
                    str(e) or type(e).__name__,
                )
                return None

            if span is not None:
                span.set_attribute(ATTR_LOCK_RENEWED, renewed)

        if renewed:
            self.renewal_count += 1
            logger.debug("Renewed lease: key=%s, renewals=%d", self._key, self.renewal_count)
        return renewed

    def _mark_lost(self) -> None:
        self._owned = False
        self._lost = True
        logger.warning(
            "Lock lost, watchdog stopped: key=%s, renewals=%d",
            self._key,
            self.renewal_count,
        )
        if self._on_lost is not None:
            try:
                self._on_lost(self)
            except Exception:
                logger.exception("on_lost callback failed: key=%s", self._key)


__all__ = [
    "Watchdog",
]
