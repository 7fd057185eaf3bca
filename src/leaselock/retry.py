"""
Backoff policy for blocking lock acquisition.

Blocking acquire is the only place the library retries anything. It retries
the non-blocking acquire with capped exponential backoff and jitter, so
many waiters on one key do not hammer the store in lockstep.

This module provides:
- BackoffConfig: Configuration for the retry delay
- calculate_backoff: Delay for a given attempt number
"""

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class BackoffConfig:
    """
    Configuration for acquire retry delays.

    Attributes:
        initial_delay: Delay in seconds before the first retry
        max_delay: Maximum delay in seconds between retries
        exponential_base: Growth factor per attempt; 1.0 gives a fixed delay
        jitter: Fraction of delay to add or remove as random jitter (0-1)

    Example:
        >>> fixed = BackoffConfig(initial_delay=0.2, max_delay=0.2, exponential_base=1.0)
        >>> capped = BackoffConfig(initial_delay=0.05, max_delay=1.0)
    """

    initial_delay: float = 0.1
    max_delay: float = 2.0
    exponential_base: float = 2.0
    jitter: float = 0.1

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.initial_delay <= 0:
            raise ValueError(f"initial_delay must be positive, got {self.initial_delay}.")

        if self.max_delay <= 0:
            raise ValueError(f"max_delay must be positive, got {self.max_delay}.")

        if self.max_delay < self.initial_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= initial_delay ({self.initial_delay})."
            )

        if self.exponential_base < 1.0:
            raise ValueError(f"exponential_base must be >= 1.0, got {self.exponential_base}.")

        if not 0.0 <= self.jitter <= 1.0:
            raise ValueError(f"jitter must be between 0.0 and 1.0, got {self.jitter}.")


def calculate_backoff(attempt: int, config: BackoffConfig) -> float:
    """
    Calculate backoff delay with exponential growth and jitter.

    Args:
        attempt: Current attempt number (0-based)
        config: Backoff configuration

    Returns:
        Delay in seconds, never negative

    Example:
        >>> config = BackoffConfig(initial_delay=0.1, max_delay=2.0)
        >>> delay = calculate_backoff(0, config)  # ~0.1s
        >>> delay = calculate_backoff(3, config)  # ~0.8s
    """
    delay = config.initial_delay * (config.exponential_base**attempt)
    delay = min(delay, config.max_delay)

    jitter_range = delay * config.jitter
    delay += random.uniform(-jitter_range, jitter_range)  # nosec B311 - not crypto

    return max(0.0, delay)


__all__ = [
    "BackoffConfig",
    "calculate_backoff",
]
