"""Shared asset and account constants for tests.

Asset identifiers are lowercase for consistency with normalize_asset().

Usage:
    from tests.helpers import ETH, USDC
    # or
    from tests.helpers.constants import ETH, USDC
"""

# =============================================================================
# Assets (sorted order: dai < eth < usdc)
# =============================================================================

DAI = "dai"
ETH = "eth"
USDC = "usdc"

# =============================================================================
# Accounts
# =============================================================================

ALICE = "alice"
BOB = "bob"
CAROL = "carol"

# Starting balance of every funded account, per asset
INITIAL_BALANCE = 10**24

# =============================================================================
# Time
# =============================================================================

NOW = 1_700_000_000
DEADLINE = NOW + 600
