"""Test helpers module for shared test utilities.

- constants: Asset ids and account names
- factories: Pool, store and executor factory functions
"""

from tests.helpers.constants import (
    DOT,
    HKO,
    KSM,
    LP_BASE,
    PARA,
    PROVIDER,
    TRADER,
    USDT,
    XDOT,
)
from tests.helpers.factories import ZERO_FEE, make_funded_executor, make_pool, make_store

__all__ = [
    # Constants
    "KSM",
    "DOT",
    "USDT",
    "HKO",
    "PARA",
    "XDOT",
    "LP_BASE",
    "TRADER",
    "PROVIDER",
    # Factories
    "ZERO_FEE",
    "make_pool",
    "make_store",
    "make_funded_executor",
]
