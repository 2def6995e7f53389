"""AMM error classes.

Every failure aborts the whole operation with no state change. Each class
carries a stable ``kind`` string so callers (and the HTTP layer) can tell a
retryable failure such as an expired deadline from invalid parameters.
"""

from __future__ import annotations


class AmmError(Exception):
    """Base error for AMM operations."""

    kind: str = "amm_error"


class ValidationError(AmmError):
    """Base for caller-supplied values that fail validation."""

    kind = "validation_error"


class InvalidAmount(ValidationError):
    """An amount or minimum is non-positive, or a desired amount is below its minimum."""

    kind = "invalid_amount"


class InvalidInput(ValidationError):
    """Input to an arithmetic primitive is out of its domain."""

    kind = "invalid_input"


class InvalidReserves(AmmError):
    """A reserve needed for pricing is zero or negative."""

    kind = "invalid_reserves"


class DeadlineExpired(AmmError):
    """The clock has passed the caller's deadline."""

    kind = "deadline_expired"


class SlippageExceeded(AmmError):
    """A computed amount is below the caller's minimum."""

    kind = "slippage_exceeded"


class InsufficientShares(AmmError):
    """The caller holds fewer shares than requested."""

    kind = "insufficient_shares"


class InsufficientLiquidity(AmmError):
    """The requested output cannot be paid from the pool's reserves."""

    kind = "insufficient_liquidity"


class InsufficientLiquidityMinted(AmmError):
    """A deposit would mint zero shares."""

    kind = "insufficient_liquidity_minted"


class UnsupportedPath(AmmError):
    """The swap path is not a direct two-asset pair."""

    kind = "unsupported_path"


class EmptyPool(AmmError):
    """The pool has a zero reserve, so no price exists."""

    kind = "empty_pool"


class PoolNotFound(AmmError):
    """No pool has been created for the pair."""

    kind = "not_found"


class InvariantViolation(AmmError):
    """A pool's reserve/share invariants do not hold."""

    kind = "invariant_violation"


class TransferFailed(AmmError):
    """The asset ledger refused a transfer."""

    kind = "transfer_failed"

    def __init__(self, asset: str, account: str, amount: int, direction: str) -> None:
        self.asset = asset
        self.account = account
        self.amount = amount
        self.direction = direction
        super().__init__(f"Ledger {direction} of {amount} {asset} for {account} failed")
