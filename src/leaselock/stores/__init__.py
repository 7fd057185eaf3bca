"""
Store adapters for leaselock.

The adapter is the boundary to the key-value store that holds lock state.
It exposes the atomic single-key primitives the locking strategies are
built from.

Adapters:
- InMemoryStoreAdapter: process-local, for tests and development
- RedisStoreAdapter: a single Redis endpoint (requires the ``redis`` extra)
"""

from leaselock.stores.in_memory import InMemoryStoreAdapter
from leaselock.stores.interface import StoreAdapter
from leaselock.stores.redis import (
    REDIS_AVAILABLE,
    RedisNotAvailableError,
    RedisStoreAdapter,
    RedisStoreConfig,
)

__all__ = [
    "StoreAdapter",
    "InMemoryStoreAdapter",
    "RedisStoreAdapter",
    "RedisStoreConfig",
    "RedisNotAvailableError",
    "REDIS_AVAILABLE",
]
