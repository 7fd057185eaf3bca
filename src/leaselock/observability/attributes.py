"""
Standard span attribute names for leaselock tracing.

Using shared constants keeps span attributes consistent between the lock
manager, the strategies and the watchdog, so traces can be filtered on the
same keys regardless of which component emitted them.
"""

ATTR_LOCK_KEY = "leaselock.lock.key"
"""Lock key identifier (string)."""

ATTR_LOCK_STRATEGY = "leaselock.lock.strategy"
"""Name of the locking strategy: naive, atomic or leased (string)."""

ATTR_LOCK_LEASE_SECONDS = "leaselock.lock.lease_seconds"
"""Requested lease duration in seconds (float)."""

ATTR_LOCK_TIMEOUT = "leaselock.lock.timeout"
"""Blocking acquire wait budget in seconds, -1 for a single attempt (float)."""

ATTR_LOCK_ACQUIRED = "leaselock.lock.acquired"
"""Whether the lock was acquired (boolean)."""

ATTR_LOCK_ATTEMPTS = "leaselock.lock.attempts"
"""Number of acquisition attempts made (integer)."""

ATTR_LOCK_RELEASED = "leaselock.lock.released"
"""Whether a release actually deleted the key (boolean)."""

ATTR_LOCK_RENEWED = "leaselock.lock.renewed"
"""Whether a renewal extended the lease (boolean)."""

ATTR_ERROR_TYPE = "error.type"
"""Exception class name when an operation fails (string)."""

__all__ = [
    "ATTR_LOCK_KEY",
    "ATTR_LOCK_STRATEGY",
    "ATTR_LOCK_LEASE_SECONDS",
    "ATTR_LOCK_TIMEOUT",
    "ATTR_LOCK_ACQUIRED",
    "ATTR_LOCK_ATTEMPTS",
    "ATTR_LOCK_RELEASED",
    "ATTR_LOCK_RENEWED",
    "ATTR_ERROR_TYPE",
]
