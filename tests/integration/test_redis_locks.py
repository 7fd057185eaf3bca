"""
Integration tests for locks backed by a real Redis server.

These tests require Docker and verify:
- Acquire, contend, release and re-acquire
- Lease expiry and rejected late release
- Mutual exclusion under concurrent acquire
- Watchdog renewal and loss detection
- Naive takeover of a key left without expiry

Leases are a fraction of a second so the suite runs in real time.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import pytest

from leaselock import (
    REDIS_AVAILABLE,
    Lease,
    LockConfig,
    LockLostError,
    LockTimeoutError,
    LockUnavailableError,
)

from .conftest import KEY_PREFIX, skip_if_no_redis_infra

# Skip all tests if Redis is not available
if not REDIS_AVAILABLE:
    pytest.skip("Redis not available", allow_module_level=True)

from leaselock import LockManager, RedisStoreAdapter

pytestmark = [
    pytest.mark.integration,
    pytest.mark.redis,
    skip_if_no_redis_infra,
]

LEASED_CONFIG = LockConfig(
    watchdog_lease_seconds=0.6,
    renew_timeout=0.5,
    enable_tracing=False,
)


def make_manager(store: RedisStoreAdapter, strategy: str = "atomic", **kwargs: Any) -> LockManager:
    kwargs.setdefault("config", LockConfig(enable_tracing=False))
    return LockManager(store, strategy, **kwargs)


class TestRedisStorePrimitives:
    """The adapter against a real server."""

    async def test_conditional_set_attaches_expiry(self, redis_store, redis_client) -> None:
        assert await redis_store.conditional_set("foo", "t1", 5) is True
        assert await redis_store.conditional_set("foo", "t2", 5) is False

        assert await redis_client.get(f"{KEY_PREFIX}foo") == "t1"
        assert 0 < await redis_client.pttl(f"{KEY_PREFIX}foo") <= 5000

    async def test_compare_and_delete(self, redis_store, redis_client) -> None:
        await redis_store.conditional_set("foo", "t1", 5)

        assert await redis_store.compare_and_delete("foo", "t2") is False
        assert await redis_client.get(f"{KEY_PREFIX}foo") == "t1"
        assert await redis_store.compare_and_delete("foo", "t1") is True
        assert await redis_client.exists(f"{KEY_PREFIX}foo") == 0

    async def test_compare_and_extend(self, redis_store, redis_client) -> None:
        await redis_store.conditional_set("foo", "t1", 1)

        assert await redis_store.compare_and_extend("foo", "t2", 60) is False
        assert await redis_client.pttl(f"{KEY_PREFIX}foo") <= 1000
        assert await redis_store.compare_and_extend("foo", "t1", 60) is True
        assert await redis_client.pttl(f"{KEY_PREFIX}foo") > 1000

    async def test_get_set_and_expire(self, redis_store, redis_client) -> None:
        assert await redis_store.get_set("foo", "a") is None
        assert await redis_store.get_set("foo", "b") == "a"
        assert await redis_client.pttl(f"{KEY_PREFIX}foo") == -1

        assert await redis_store.expire("foo", 5) is True
        assert await redis_client.pttl(f"{KEY_PREFIX}foo") > 0
        assert await redis_store.expire("missing", 5) is False


class TestEndToEnd:
    @pytest.mark.parametrize("strategy", ["atomic", "leased"])
    async def test_acquire_contend_release_reacquire(self, store_factory, strategy) -> None:
        a = make_manager(await store_factory(), strategy, config=LEASED_CONFIG)
        b = make_manager(await store_factory(), strategy, config=LEASED_CONFIG)
        try:
            t1 = await a.acquire("foo", 30)
            with pytest.raises(LockUnavailableError):
                await b.acquire("foo", 30)
            await a.release("foo", t1.token)
            t2 = await b.acquire("foo", 30)
            await b.release("foo", t2.token)
        finally:
            await a.close()
            await b.close()

    async def test_expired_lease_and_late_release(self, store_factory, redis_client) -> None:
        a = make_manager(await store_factory())
        b = make_manager(await store_factory())

        t1 = await a.acquire("foo", 0.3)
        await asyncio.sleep(0.5)
        t2 = await b.acquire("foo", 0.3)

        with pytest.raises(LockLostError):
            await a.release("foo", t1.token)
        assert await redis_client.get(f"{KEY_PREFIX}foo") == t2.token

    async def test_blocking_acquire(self, store_factory) -> None:
        a = make_manager(await store_factory())
        b = make_manager(await store_factory())
        await a.acquire("foo", 0.3)

        lease = await b.acquire("foo", 5, wait_timeout=2)

        assert lease.key == "foo"

    async def test_blocking_acquire_times_out(self, store_factory) -> None:
        a = make_manager(await store_factory())
        b = make_manager(await store_factory())
        await a.acquire("foo", 30)

        started = time.monotonic()
        with pytest.raises(LockTimeoutError):
            await b.acquire("foo", 30, wait_timeout=0.5)

        assert time.monotonic() - started < 2


class TestMutualExclusion:
    @pytest.mark.parametrize("strategy", ["naive", "atomic", "leased"])
    async def test_race_exactly_one_winner(self, store_factory, strategy) -> None:
        managers = [
            make_manager(await store_factory(), strategy, config=LEASED_CONFIG) for _ in range(10)
        ]
        try:
            results = await asyncio.gather(
                *(m.acquire("race", 30) for m in managers), return_exceptions=True
            )
        finally:
            for m in managers:
                await m.close()

        assert sum(isinstance(r, Lease) for r in results) == 1
        assert sum(isinstance(r, LockUnavailableError) for r in results) == len(managers) - 1


class TestLeasedWatchdog:
    async def test_lease_outlives_internal_expiry(self, store_factory, redis_client) -> None:
        holder = make_manager(await store_factory(), "leased", config=LEASED_CONFIG)
        other = make_manager(await store_factory(), "leased", config=LEASED_CONFIG)
        try:
            lease = await holder.acquire("job")

            await asyncio.sleep(2.0)

            assert await redis_client.get(f"{KEY_PREFIX}job") == lease.token
            with pytest.raises(LockUnavailableError):
                await other.acquire("job")
            holder.ensure_held(lease)
            await holder.release("job", lease.token)
        finally:
            await holder.close()
            await other.close()

    async def test_out_of_band_delete_detected(self, store_factory, redis_client) -> None:
        holder = make_manager(await store_factory(), "leased", config=LEASED_CONFIG)
        try:
            lease = await holder.acquire("job")
            watchdog = holder.strategy.watchdog_for("job", lease.token)
            await redis_client.delete(f"{KEY_PREFIX}job")

            await asyncio.sleep(0.5)

            with pytest.raises(LockLostError):
                holder.ensure_held(lease)
            assert holder.held_lock_count == 0
            renewals = watchdog.renewal_count
            await asyncio.sleep(0.5)
            assert watchdog.renewal_count == renewals
        finally:
            await holder.close()

    async def test_crashed_holder_frees_key(self, store_factory) -> None:
        holder = make_manager(await store_factory(), "leased", config=LEASED_CONFIG)
        other = make_manager(await store_factory(), "leased", config=LEASED_CONFIG)
        try:
            await holder.acquire("job")
            await holder.close()

            lease = await other.acquire("job", wait_timeout=2)

            assert lease.key == "job"
        finally:
            await other.close()


class TestNaive:
    async def test_takes_over_key_without_expiry(self, redis_store, redis_client) -> None:
        stale_deadline = int(time.time() * 1000) - 1000
        await redis_client.set(f"{KEY_PREFIX}foo", str(stale_deadline))
        manager = make_manager(redis_store, "naive")

        lease = await manager.acquire("foo", 5)

        assert int(lease.token) > stale_deadline
        assert await redis_client.get(f"{KEY_PREFIX}foo") == lease.token
        assert await redis_client.pttl(f"{KEY_PREFIX}foo") > 0

    async def test_unexpired_deadline_blocks(self, redis_store) -> None:
        a = make_manager(redis_store, "naive")
        await a.acquire("foo", 5)

        with pytest.raises(LockUnavailableError):
            await make_manager(redis_store, "naive").acquire("foo", 5)
