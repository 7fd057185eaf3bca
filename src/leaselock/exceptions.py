"""Library exceptions for the leaselock package."""


class LeaseLockError(Exception):
    """Base exception for leaselock library."""

    pass


class LockUnavailableError(LeaseLockError):
    """
    Raised when a lock is already held by another, unexpired token.

    Recoverable by retrying later. The lock manager only retries on the
    caller's behalf when a wait timeout is given to ``acquire``.

    Attributes:
        key: The lock key that could not be acquired
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Lock '{key}' is held by another owner")


class LockLostError(LeaseLockError):
    """
    Raised when renew or release finds that the token no longer owns the key.

    The lease already expired or was taken by someone else. Nothing in the
    store is corrupted, but any critical section that relied on the lock is
    no longer protected.

    Attributes:
        key: The lock key
        token: The token that used to own the key
    """

    def __init__(self, key: str, token: str) -> None:
        self.key = key
        self.token = token
        super().__init__(f"Lock '{key}' is no longer owned by token {token}")


class LockTimeoutError(LeaseLockError):
    """
    Raised when a blocking acquire exhausts its wait budget.

    Distinct from LockUnavailableError so callers can tell "contended"
    apart from "gave up waiting".

    Attributes:
        key: The lock key
        timeout: The wait budget in seconds
        attempts: Number of acquisition attempts made
    """

    def __init__(self, key: str, timeout: float, attempts: int) -> None:
        self.key = key
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(
            f"Timed out acquiring lock '{key}' after {timeout}s ({attempts} attempts)"
        )


class StoreUnavailableError(LeaseLockError):
    """
    Raised when the backing key-value store fails.

    The original exception is chained as ``__cause__``. The protocol never
    retries on this error so that a store outage is not mistaken for lock
    contention.

    Attributes:
        operation: Store primitive that failed (e.g. "conditional_set")
        key: The key the primitive was applied to
        reason: Description of the failure
    """

    def __init__(self, operation: str, key: str, reason: str) -> None:
        self.operation = operation
        self.key = key
        self.reason = reason
        super().__init__(f"Store operation {operation} failed for '{key}': {reason}")


class UnsupportedOperationError(LeaseLockError):
    """
    Raised when a strategy does not offer an operation.

    The naive strategy cannot tell owners apart, so it has no safe renew or
    release.

    Attributes:
        strategy: Strategy name
        operation: The unsupported operation
    """

    def __init__(self, strategy: str, operation: str) -> None:
        self.strategy = strategy
        self.operation = operation
        super().__init__(f"The {strategy} strategy does not support {operation}")
