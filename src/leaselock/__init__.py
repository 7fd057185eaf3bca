"""
leaselock - Distributed locks over a shared key-value store.

This library provides:
- Three locking strategies: naive timestamp, atomic set-if-absent, and
  leased with watchdog renewal
- A lock manager with blocking acquire, renew, release and an async
  context manager
- Store adapters for Redis and for in-process testing
- Injectable clocks and optional OpenTelemetry tracing
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("leaselock-py")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from leaselock.clock import LeaseClock, SystemClock
from leaselock.config import LockConfig
from leaselock.exceptions import (
    LeaseLockError,
    LockLostError,
    LockTimeoutError,
    LockUnavailableError,
    StoreUnavailableError,
    UnsupportedOperationError,
)
from leaselock.lease import Lease, LockState, lock_key, new_token
from leaselock.manager import LockManager
from leaselock.retry import BackoffConfig, calculate_backoff
from leaselock.stores import (
    REDIS_AVAILABLE,
    InMemoryStoreAdapter,
    RedisNotAvailableError,
    RedisStoreAdapter,
    RedisStoreConfig,
    StoreAdapter,
)
from leaselock.strategies import (
    AtomicNXStrategy,
    LeasedStrategy,
    LockStrategy,
    NaiveStrategy,
)
from leaselock.watchdog import Watchdog

__all__ = [
    "__version__",
    # Manager
    "LockManager",
    "Lease",
    "LockState",
    "lock_key",
    "new_token",
    # Configuration
    "LockConfig",
    "BackoffConfig",
    "calculate_backoff",
    # Clocks
    "LeaseClock",
    "SystemClock",
    # Strategies
    "LockStrategy",
    "NaiveStrategy",
    "AtomicNXStrategy",
    "LeasedStrategy",
    "Watchdog",
    # Stores
    "StoreAdapter",
    "InMemoryStoreAdapter",
    "RedisStoreAdapter",
    "RedisStoreConfig",
    "RedisNotAvailableError",
    "REDIS_AVAILABLE",
    # Exceptions
    "LeaseLockError",
    "LockUnavailableError",
    "LockLostError",
    "LockTimeoutError",
    "StoreUnavailableError",
    "UnsupportedOperationError",
]
