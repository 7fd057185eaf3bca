"""
Locking strategy interface.

A strategy is one algorithm for the acquire / renew / release protocol on
top of a StoreAdapter. Strategies report outcomes as booleans; turning a
failed compare into ``LockLostError`` is the lock manager's job.
"""

from abc import ABC, abstractmethod
from typing import ClassVar


class LockStrategy(ABC):
    """
    Abstract base class for locking strategies.

    Implementations:
    - NaiveStrategy: timestamp value with a get-and-set takeover path
    - AtomicNXStrategy: token written with its expiry in one step
    - LeasedStrategy: AtomicNX plus a watchdog that keeps the lease alive
    """

    name: ClassVar[str]
    supports_release: ClassVar[bool] = True

    @abstractmethod
    async def try_acquire(self, key: str, lease_seconds: float, token: str) -> str | None:
        """
        Make one non-blocking acquisition attempt.

        Args:
            key: Lock key
            lease_seconds: Requested lease duration
            token: Fresh token proposed by the caller

        Returns:
            The token that now owns the key, or None if the key is held.
            Strategies that cannot use the caller's token return their own.
        """
        pass

    @abstractmethod
    async def renew(self, key: str, token: str, lease_seconds: float) -> bool:
        """Extend the lease if ``token`` still owns ``key``."""
        pass

    @abstractmethod
    async def release(self, key: str, token: str) -> bool:
        """Delete the key if ``token`` still owns it."""
        pass

    def is_lost(self, key: str, token: str) -> bool:
        """Advisory local view: True if this process already knows the lease is gone."""
        return False

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Stop any background work owned by the strategy."""
        pass
