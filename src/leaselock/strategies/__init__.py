"""
Locking strategies.

Three interchangeable implementations of the acquire / renew / release
protocol, from least to most robust:

- NaiveStrategy ("naive"): timestamp value, racy takeover, no release
- AtomicNXStrategy ("atomic"): set-if-absent with expiry, compare-and-delete
- LeasedStrategy ("leased"): atomic plus watchdog renewal
"""

from leaselock.strategies.atomic import AtomicNXStrategy
from leaselock.strategies.interface import LockStrategy
from leaselock.strategies.leased import LeasedStrategy
from leaselock.strategies.naive import NaiveStrategy

STRATEGY_NAMES = (
    NaiveStrategy.name,
    AtomicNXStrategy.name,
    LeasedStrategy.name,
)

__all__ = [
    "LockStrategy",
    "NaiveStrategy",
    "AtomicNXStrategy",
    "LeasedStrategy",
    "STRATEGY_NAMES",
]
