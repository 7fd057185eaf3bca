"""
Shared pytest fixtures for integration tests.

This module provides fixtures for Redis test infrastructure using
testcontainers for automatic container management.

If testcontainers or Docker is not available, tests are automatically skipped.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import pytest
import pytest_asyncio

from leaselock.stores.redis import RedisStoreAdapter, RedisStoreConfig

KEY_PREFIX = "test:lock:"

# ============================================================================
# Testcontainers Detection
# ============================================================================

TESTCONTAINERS_AVAILABLE = False

try:
    from testcontainers.redis import RedisContainer

    TESTCONTAINERS_AVAILABLE = True
except ImportError:
    RedisContainer = None  # type: ignore[assignment, misc]


def is_docker_available() -> bool:
    """Check if Docker is available for running containers."""
    import subprocess

    try:
        result = subprocess.run(
            ["docker", "info"],
            capture_output=True,
            timeout=5,
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, OSError):
        return False


DOCKER_AVAILABLE = is_docker_available()


# ============================================================================
# Skip Conditions
# ============================================================================

skip_if_no_redis_infra = pytest.mark.skipif(
    not (TESTCONTAINERS_AVAILABLE and DOCKER_AVAILABLE),
    reason="Redis test infrastructure not available",
)


# ============================================================================
# Redis Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def redis_container() -> Generator[Any, None, None]:
    """
    Provide Redis container for integration tests.

    Uses testcontainers to automatically start and stop a Redis container.
    Container is shared across all tests in the session for efficiency.
    """
    if not TESTCONTAINERS_AVAILABLE or not DOCKER_AVAILABLE:
        pytest.skip("Redis testcontainer not available")

    container = RedisContainer("redis:7")
    container.start()

    yield container

    container.stop()


@pytest.fixture(scope="session")
def redis_connection_url(redis_container: Any) -> str:
    """Get Redis connection URL from container."""
    host = redis_container.get_container_host_ip()
    port = redis_container.get_exposed_port(6379)
    return f"redis://{host}:{port}"


@pytest_asyncio.fixture
async def redis_client(redis_connection_url: str) -> AsyncGenerator[Any, None]:
    """
    Provide async Redis client connected to container.

    Flushes database before and after each test for isolation. Tests use it
    to inspect keys and to interfere with locks out of band.
    """
    import redis.asyncio as redis

    client = redis.from_url(
        redis_connection_url,
        decode_responses=True,
        single_connection_client=True,
    )

    await client.flushall()

    yield client

    await client.flushall()
    await client.aclose()


@pytest_asyncio.fixture
async def store_factory(
    redis_connection_url: str,
    redis_client: Any,
) -> AsyncGenerator[Callable[[], Any], None]:
    """
    Factory fixture for connected Redis store adapters.

    Each adapter has its own connection pool, like a separate process.
    All adapters created by the factory are closed on teardown.
    """
    stores: list[RedisStoreAdapter] = []

    async def create_store() -> RedisStoreAdapter:
        store = RedisStoreAdapter(
            RedisStoreConfig(redis_url=redis_connection_url, key_prefix=KEY_PREFIX)
        )
        await store.connect()
        stores.append(store)
        return store

    yield create_store

    for store in stores:
        await store.close()


@pytest_asyncio.fixture
async def redis_store(store_factory: Callable[[], Any]) -> RedisStoreAdapter:
    """Provide one connected Redis store adapter."""
    return await store_factory()
