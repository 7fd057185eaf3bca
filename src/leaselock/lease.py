"""
Lease value types and token helpers.

A lease is the caller's receipt for a successful acquisition. Its token is
what the store compares against on renew and release.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class LockState(Enum):
    """
    Observable states of a single lock key.

    Attributes:
        UNLOCKED: No live token owns the key
        HELD: A token owns the key until release or lease expiry
    """

    UNLOCKED = "unlocked"
    HELD = "held"


@dataclass(frozen=True)
class Lease:
    """
    Information about an acquired lock.

    Attributes:
        key: The lock key
        token: Opaque ownership token, compared by the store on renew/release
        strategy: Name of the strategy that acquired the lock
        lease_seconds: Lease duration the caller asked for. The leased strategy
            writes its shorter internal lease to the store instead and renews it
        acquired_at: When the lock was acquired (UTC)
        holder_id: Optional identifier for the lock holder (for debugging)
    """

    key: str
    token: str
    strategy: str
    lease_seconds: float
    acquired_at: datetime
    holder_id: str | None = None


def new_token() -> str:
    """Generate a fresh, unguessable ownership token."""
    return uuid.uuid4().hex


def validate_key(key: str) -> str:
    """
    Check that a lock key is usable.

    Raises:
        ValueError: If the key is empty or only whitespace
    """
    if not key or not key.strip():
        raise ValueError("Lock key must be a non-empty string")
    return key


def validate_lease(lease_seconds: float) -> float:
    """
    Check that a lease duration is usable.

    Raises:
        ValueError: If the duration is not positive
    """
    if lease_seconds <= 0:
        raise ValueError(f"lease_seconds must be positive, got {lease_seconds}")
    return lease_seconds


def lock_key(*parts: str) -> str:
    """
    Build a lock key from its parts.

    Provides a consistent naming convention, e.g. ``lock_key("orders", "42")``
    gives ``"orders:42"``. Empty parts are skipped.

    Raises:
        ValueError: If no non-empty part is given
    """
    key = ":".join(str(part) for part in parts if str(part))
    return validate_key(key)


__all__ = [
    "Lease",
    "LockState",
    "lock_key",
    "new_token",
    "validate_key",
    "validate_lease",
]
