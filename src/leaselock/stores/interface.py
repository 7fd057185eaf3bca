"""
Store adapter interface.

The store is the only source of truth for lock ownership. Every primitive
below must be executed by the store as one indivisible step; the protocol
layer relies on that and takes no client-side locks of its own.

This module provides:
- StoreAdapter: Abstract base class for key-value store adapters
"""

from abc import ABC, abstractmethod


class StoreAdapter(ABC):
    """
    Abstract base class for the key-value store behind the locks.

    TTLs are given in seconds and may be fractional. Implementations raise
    ``StoreUnavailableError`` when the store itself fails; a primitive that
    simply does not apply (key absent, value mismatch) returns False.
    """

    @abstractmethod
    async def conditional_set(self, key: str, value: str, ttl: float | None) -> bool:
        """
        Set ``key`` to ``value`` only if the key does not exist.

        Args:
            key: Lock key
            value: Value to store
            ttl: Expiry in seconds, applied atomically with the write.
                None leaves the key without expiry (naive strategy only).

        Returns:
            True if the value was written
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the current value of ``key``, or None if it does not exist."""
        pass

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """
        Delete ``key`` only if its current value equals ``expected``.

        Returns:
            True if a key was deleted
        """
        pass

    @abstractmethod
    async def compare_and_extend(self, key: str, expected: str, ttl: float) -> bool:
        """
        Reset the expiry of ``key`` to ``ttl`` only if its value equals ``expected``.

        Returns:
            True if the expiry was refreshed
        """
        pass

    @abstractmethod
    async def get_set(self, key: str, value: str) -> str | None:
        """
        Unconditionally overwrite ``key`` and return the previous value.

        Only used by the naive strategy. The write clears any expiry, which
        has to be re-attached with ``expire`` in a separate round trip.
        """
        pass

    @abstractmethod
    async def expire(self, key: str, ttl: float) -> bool:
        """
        Attach an expiry to an existing key.

        Only used by the naive strategy.

        Returns:
            True if the key existed and the expiry was set
        """
        pass

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Release any resources held by the adapter."""
        pass
