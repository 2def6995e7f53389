"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Asset identifiers, accounts and times
- collaborators: Clock and ledger doubles
"""

from tests.helpers.collaborators import FixedClock, FlakyLedger, funded_ledger
from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    DEADLINE,
    ETH,
    INITIAL_BALANCE,
    NOW,
    USDC,
)

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CAROL",
    "DAI",
    "ETH",
    "USDC",
    "INITIAL_BALANCE",
    "NOW",
    "DEADLINE",
    # Collaborators
    "FixedClock",
    "FlakyLedger",
    "funded_ledger",
]
