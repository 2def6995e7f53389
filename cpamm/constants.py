"""Protocol constants for the AMM.

Centralizes fixed-point scales and well-known account names.
"""

# Fixed-point scale for spot prices (1e18)
# A price is the amount of asset B worth one unit of asset A, times PRICE_SCALE
PRICE_SCALE = 10**18

# Default ledger account that holds the reserves of every pool
CUSTODY_ACCOUNT = "amm"

# Separator used when a pair key is rendered as a single string
PAIR_SEPARATOR = "/"
