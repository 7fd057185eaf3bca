"""
Configuration for the lock manager and its strategies.

This module provides:
- LockConfig: Lease durations, watchdog cadence and acquire backoff
"""

from __future__ import annotations

from dataclasses import dataclass, field

from leaselock.retry import BackoffConfig


@dataclass(frozen=True)
class LockConfig:
    """
    Configuration for a LockManager.

    Attributes:
        default_lease_seconds: Lease used when acquire/renew get no explicit
            duration (default: 30)
        watchdog_lease_seconds: Internal lease of the leased strategy; the
            watchdog keeps extending it by this amount (default: 30)
        renew_ratio: Fraction of the lease after which the watchdog renews
            (default: 1/3)
        renew_timeout: Per-call timeout in seconds for a watchdog renewal,
            independent of the lease length (default: 2.0)
        backoff: Retry delays for blocking acquire
        enable_tracing: Enable OpenTelemetry tracing if available (default: True)

    Example:
        >>> config = LockConfig(watchdog_lease_seconds=9.0, renew_timeout=1.0)
        >>> config.renew_interval
        3.0
    """

    default_lease_seconds: float = 30.0
    watchdog_lease_seconds: float = 30.0
    renew_ratio: float = 1 / 3
    renew_timeout: float = 2.0
    backoff: BackoffConfig = field(default_factory=BackoffConfig)
    enable_tracing: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.default_lease_seconds <= 0:
            raise ValueError(
                f"default_lease_seconds must be positive, got {self.default_lease_seconds}."
            )

        if self.watchdog_lease_seconds <= 0:
            raise ValueError(
                f"watchdog_lease_seconds must be positive, got {self.watchdog_lease_seconds}."
            )

        if not 0.0 < self.renew_ratio < 1.0:
            raise ValueError(
                f"renew_ratio must be between 0.0 and 1.0 (exclusive), got {self.renew_ratio}."
            )

        if self.renew_timeout <= 0:
            raise ValueError(f"renew_timeout must be positive, got {self.renew_timeout}.")

    @property
    def renew_interval(self) -> float:
        """Seconds between watchdog renewals."""
        return self.watchdog_lease_seconds * self.renew_ratio


__all__ = [
    "LockConfig",
]
