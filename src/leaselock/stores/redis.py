"""Redis store adapter.

Maps the lock primitives onto a single Redis endpoint:

- conditional_set: ``SET key value NX PX ttl`` (value and expiry in one command)
- compare_and_delete / compare_and_extend: Lua scripts, which Redis runs
  without interleaving any other command
- get_set / expire: ``SET ... GET`` and ``PEXPIRE``, for the naive strategy

Example:
    >>> from leaselock.stores.redis import RedisStoreAdapter, RedisStoreConfig
    >>>
    >>> config = RedisStoreConfig(redis_url="redis://localhost:6379", key_prefix="myapp:lock:")
    >>> async with RedisStoreAdapter(config) as store:
    ...     manager = LockManager(store)
    ...     async with manager.lock("orders:42", 30):
    ...         await rebuild_order(42)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar

from leaselock.exceptions import StoreUnavailableError
from leaselock.stores.interface import StoreAdapter

# Optional Redis import - fail gracefully if not installed
try:
    import redis.asyncio as aioredis
    from redis.asyncio import Redis
    from redis.exceptions import RedisError

    REDIS_AVAILABLE = True
except ImportError:
    REDIS_AVAILABLE = False
    aioredis = None  # type: ignore[assignment]
    Redis = None  # type: ignore[assignment, misc]
    RedisError = Exception  # type: ignore[assignment, misc]

logger = logging.getLogger(__name__)

T = TypeVar("T")

# KEYS[1] lock key, ARGV[1] expected token
COMPARE_AND_DELETE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""

# KEYS[1] lock key, ARGV[1] expected token, ARGV[2] new ttl in milliseconds
COMPARE_AND_EXTEND_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('pexpire', KEYS[1], ARGV[2])
else
    return 0
end
"""


class RedisNotAvailableError(ImportError):
    """Raised when redis package is not installed."""

    def __init__(self) -> None:
        super().__init__(
            "Redis package is not installed. Install it with: pip install leaselock-py[redis]"
        )


@dataclass(frozen=True)
class RedisStoreConfig:
    """Configuration for the Redis store adapter.

    Attributes:
        redis_url: Redis connection URL (e.g., "redis://localhost:6379")
        key_prefix: Prefix prepended to every lock key (default: "lock:")
        socket_timeout: Socket timeout in seconds (default: 5.0)
        socket_connect_timeout: Socket connection timeout in seconds (default: 5.0)
        single_connection_client: Use single connection instead of pool (default: False).
            Useful for testing to avoid event loop issues.
    """

    redis_url: str = "redis://localhost:6379"
    key_prefix: str = "lock:"
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    single_connection_client: bool = False

    def __post_init__(self) -> None:
        if self.socket_timeout <= 0:
            raise ValueError(f"socket_timeout must be positive, got {self.socket_timeout}.")
        if self.socket_connect_timeout <= 0:
            raise ValueError(
                f"socket_connect_timeout must be positive, got {self.socket_connect_timeout}."
            )


def _ttl_ms(ttl: float) -> int:
    return max(1, int(ttl * 1000))


def _decode(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisStoreAdapter(StoreAdapter):
    """
    Store adapter backed by a single Redis endpoint.

    Either pass a config and call ``connect()`` (or use the adapter as an
    async context manager), or pass an already configured ``redis.asyncio``
    client, which the adapter then does not close.

    Every ``RedisError`` or timeout is re-raised as ``StoreUnavailableError``
    with the original exception chained.
    """

    def __init__(
        self,
        config: RedisStoreConfig | None = None,
        *,
        client: Redis | None = None,
    ) -> None:
        """
        Initialize the Redis store adapter.

        Args:
            config: Connection settings and key prefix.
                Defaults to RedisStoreConfig() with default values.
            client: Existing redis.asyncio client to use instead of connecting.

        Raises:
            RedisNotAvailableError: If redis package is not installed
        """
        if not REDIS_AVAILABLE:
            raise RedisNotAvailableError()

        self._config = config or RedisStoreConfig()
        self._redis: Redis | None = client
        self._owns_client = client is None
        self._delete_script: Any = None
        self._extend_script: Any = None
        if client is not None:
            self._register_scripts(client)

    @property
    def config(self) -> RedisStoreConfig:
        """Get the configuration."""
        return self._config

    @property
    def is_connected(self) -> bool:
        """Check if a Redis client is available."""
        return self._redis is not None

    def _register_scripts(self, client: Redis) -> None:
        self._delete_script = client.register_script(COMPARE_AND_DELETE_SCRIPT)
        self._extend_script = client.register_script(COMPARE_AND_EXTEND_SCRIPT)

    async def connect(self) -> None:
        """
        Connect to Redis and register the Lua scripts.

        Raises:
            StoreUnavailableError: If Redis cannot be reached
        """
        if self._redis is not None:
            logger.warning("RedisStoreAdapter already connected")
            return

        client = aioredis.from_url(
            self._config.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=self._config.socket_timeout,
            socket_connect_timeout=self._config.socket_connect_timeout,
            single_connection_client=self._config.single_connection_client,
        )
        try:
            await client.ping()
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            await client.aclose()
            logger.error("Failed to connect to Redis: %s", e)
            raise StoreUnavailableError("connect", self._config.redis_url, str(e)) from e

        self._redis = client
        self._owns_client = True
        self._register_scripts(client)
        logger.info("Connected to Redis", extra={"redis_url": self._config.redis_url})

    async def close(self) -> None:
        """Close the Redis connection if this adapter opened it."""
        if self._redis is not None and self._owns_client:
            await self._redis.aclose()
            logger.info("Disconnected from Redis")
        self._redis = None
        self._delete_script = None
        self._extend_script = None

    async def __aenter__(self) -> RedisStoreAdapter:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    def _key(self, key: str) -> str:
        return f"{self._config.key_prefix}{key}"

    def _client(self, operation: str, key: str) -> Redis:
        if self._redis is None:
            raise StoreUnavailableError(operation, key, "not connected")
        return self._redis

    async def _call(self, operation: str, key: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            logger.warning(
                "Redis %s failed: key=%s, error=%s",
                operation,
                key,
                e,
            )
            raise StoreUnavailableError(operation, key, str(e)) from e

    async def conditional_set(self, key: str, value: str, ttl: float | None) -> bool:
        client = self._client("conditional_set", key)
        px = _ttl_ms(ttl) if ttl is not None else None
        result = await self._call(
            "conditional_set", key, client.set(self._key(key), value, nx=True, px=px)
        )
        return bool(result)

    async def get(self, key: str) -> str | None:
        client = self._client("get", key)
        return _decode(await self._call("get", key, client.get(self._key(key))))

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        self._client("compare_and_delete", key)
        result = await self._call(
            "compare_and_delete",
            key,
            self._delete_script(keys=[self._key(key)], args=[expected]),
        )
        return int(result) == 1

    async def compare_and_extend(self, key: str, expected: str, ttl: float) -> bool:
        self._client("compare_and_extend", key)
        result = await self._call(
            "compare_and_extend",
            key,
            self._extend_script(keys=[self._key(key)], args=[expected, _ttl_ms(ttl)]),
        )
        return int(result) == 1

    async def get_set(self, key: str, value: str) -> str | None:
        client = self._client("get_set", key)
        previous = await self._call("get_set", key, client.set(self._key(key), value, get=True))
        return _decode(previous)

    async def expire(self, key: str, ttl: float) -> bool:
        client = self._client("expire", key)
        result = await self._call("expire", key, client.pexpire(self._key(key), _ttl_ms(ttl)))
        return bool(result)


__all__ = [
    "COMPARE_AND_DELETE_SCRIPT",
    "COMPARE_AND_EXTEND_SCRIPT",
    "REDIS_AVAILABLE",
    "RedisNotAvailableError",
    "RedisStoreAdapter",
    "RedisStoreConfig",
]
