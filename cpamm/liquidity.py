"""Liquidity engine: minting and burning pool shares.

Minting rules:
- Empty pool: shares = isqrt(amount_a * amount_b). This first deposit fixes
  the share unit for the pool's lifetime.
- Funded pool: shares = min(amount_a * supply / reserve_a,
  amount_b * supply / reserve_b), so an unbalanced deposit is credited
  only for its constrained side.

Burning returns shares * reserve / supply of each asset, rounded down.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from cpamm.collaborators import AssetLedger, Clock
from cpamm.config import DEFAULT_AMM_CONFIG, AmmConfig
from cpamm.errors import (
    InsufficientLiquidityMinted,
    InsufficientShares,
    InvalidAmount,
    SlippageExceeded,
)
from cpamm.guards import ensure_deadline, ensure_positive
from cpamm.math import integer_sqrt, min_of, quote_proportional
from cpamm.models.types import normalize_asset
from cpamm.pools import Pool, PoolRegistry, PoolUpdate
from cpamm.safe_int import S
from cpamm.transfers import TransferBatch

logger = structlog.get_logger()


@dataclass(frozen=True)
class AddLiquidityResult:
    """Amounts taken from the provider and shares minted.

    amount_a/amount_b follow the asset order the caller used.
    """

    amount_a: int
    amount_b: int
    shares: int


@dataclass(frozen=True)
class RemoveLiquidityResult:
    """Amounts released to the recipient, in the caller's asset order."""

    amount_a: int
    amount_b: int


class LiquidityEngine:
    """Deposits and withdrawals against the pools of a registry."""

    def __init__(
        self,
        registry: PoolRegistry,
        ledger: AssetLedger,
        clock: Clock,
        custody: str,
        config: AmmConfig = DEFAULT_AMM_CONFIG,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.clock = clock
        self.custody = custody
        self.config = config

    def add_liquidity(
        self,
        pair: tuple[str, str],
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        sender: str,
        recipient: str,
        deadline: int,
    ) -> AddLiquidityResult:
        """Deposit both assets of a pair and mint shares to recipient.

        Args:
            pair: (asset_a, asset_b) in the order the amounts refer to
            amount_a_desired: Amount of asset_a the provider offers
            amount_b_desired: Amount of asset_b the provider offers
            amount_a_min: Minimum amount of asset_a to deposit
            amount_b_min: Minimum amount of asset_b to deposit
            sender: Account the assets are pulled from
            recipient: Provider credited with the minted shares
            deadline: Latest timestamp at which the deposit may execute

        Returns:
            AddLiquidityResult with the amounts taken and shares minted

        Raises:
            DeadlineExpired: If the clock has passed deadline
            InvalidAmount: If an amount or minimum is not a positive int, or a
                desired amount is below its minimum
            SlippageExceeded: If clamping to the pool ratio would take less
                than a minimum
            InsufficientLiquidityMinted: If the deposit mints zero shares
            TransferFailed: If the ledger refuses a pull
        """
        ensure_deadline(self.clock, deadline)
        ensure_positive("amount_a_desired", amount_a_desired)
        ensure_positive("amount_b_desired", amount_b_desired)
        ensure_positive("amount_a_min", amount_a_min)
        ensure_positive("amount_b_min", amount_b_min)
        if amount_a_desired < amount_a_min or amount_b_desired < amount_b_min:
            raise InvalidAmount(
                f"Desired amounts ({amount_a_desired}, {amount_b_desired}) "
                f"below minimums ({amount_a_min}, {amount_b_min})"
            )

        key = self.registry.resolve_pair(*pair)
        flipped = key.first != normalize_asset(pair[0])
        if flipped:
            amount_a_desired, amount_b_desired = amount_b_desired, amount_a_desired
            amount_a_min, amount_b_min = amount_b_min, amount_a_min

        with self.registry.locked(key) as pool:
            amount_a, amount_b = self._deposit_amounts(
                pool, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
            )
            shares = self._shares_to_mint(pool, amount_a, amount_b)
            if shares == 0:
                raise InsufficientLiquidityMinted(
                    f"Deposit of ({amount_a}, {amount_b}) into {key} mints no shares"
                )

            update = PoolUpdate(
                reserve_a=pool.reserve_a + amount_a,
                reserve_b=pool.reserve_b + amount_b,
                total_shares=pool.total_shares + shares,
                balances={recipient: pool.shares_of(recipient) + shares},
            )
            with TransferBatch(self.ledger, self.custody, "add_liquidity") as transfers:
                transfers.pull(key.first, sender, amount_a)
                transfers.pull(key.second, sender, amount_b)
                pool.commit(update)

        logger.info(
            "liquidity_added",
            pair=str(key),
            sender=sender,
            recipient=recipient,
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )

        if flipped:
            return AddLiquidityResult(amount_a=amount_b, amount_b=amount_a, shares=shares)
        return AddLiquidityResult(amount_a=amount_a, amount_b=amount_b, shares=shares)

    def _deposit_amounts(
        self,
        pool: Pool,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int]:
        """Amounts to take from the provider, in pool order."""
        if pool.is_empty or not self.config.clamp_deposits:
            return amount_a_desired, amount_b_desired

        amount_b_optimal = quote_proportional(amount_a_desired, pool.reserve_a, pool.reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise SlippageExceeded(
                    f"Deposit of {pool.asset_b} clamped to {amount_b_optimal}, "
                    f"below minimum {amount_b_min}"
                )
            return amount_a_desired, amount_b_optimal

        amount_a_optimal = quote_proportional(amount_b_desired, pool.reserve_b, pool.reserve_a)
        if amount_a_optimal < amount_a_min:
            raise SlippageExceeded(
                f"Deposit of {pool.asset_a} clamped to {amount_a_optimal}, "
                f"below minimum {amount_a_min}"
            )
        return amount_a_optimal, amount_b_desired

    @staticmethod
    def _shares_to_mint(pool: Pool, amount_a: int, amount_b: int) -> int:
        if pool.is_empty:
            return integer_sqrt(amount_a * amount_b)
        supply = S(pool.total_shares)
        by_a = S(amount_a) * supply // S(pool.reserve_a)
        by_b = S(amount_b) * supply // S(pool.reserve_b)
        return min_of(by_a.value, by_b.value)

    def remove_liquidity(
        self,
        pair: tuple[str, str],
        shares: int,
        amount_a_min: int,
        amount_b_min: int,
        sender: str,
        recipient: str,
        deadline: int,
    ) -> RemoveLiquidityResult:
        """Burn sender's shares and release the proportional reserves to recipient.

        Raises:
            DeadlineExpired: If the clock has passed deadline
            InvalidAmount: If shares or a minimum is not positive
            InsufficientShares: If sender holds fewer than shares
            SlippageExceeded: If an amount released is below its minimum
            TransferFailed: If the ledger refuses a push
        """
        ensure_deadline(self.clock, deadline)
        ensure_positive("shares", shares)
        ensure_positive("amount_a_min", amount_a_min)
        ensure_positive("amount_b_min", amount_b_min)

        key = self.registry.resolve_pair(*pair)
        flipped = key.first != normalize_asset(pair[0])
        if flipped:
            amount_a_min, amount_b_min = amount_b_min, amount_a_min

        with self.registry.locked(key) as pool:
            held = pool.shares_of(sender)
            if held < shares:
                logger.warning(
                    "remove_liquidity_rejected",
                    pair=str(key),
                    sender=sender,
                    held=held,
                    requested=shares,
                )
                raise InsufficientShares(f"{sender} holds {held} shares of {key}, requested {shares}")

            supply = S(pool.total_shares)
            amount_a = (S(shares) * S(pool.reserve_a) // supply).value
            amount_b = (S(shares) * S(pool.reserve_b) // supply).value
            if amount_a < amount_a_min or amount_b < amount_b_min:
                raise SlippageExceeded(
                    f"Withdrawal of ({amount_a}, {amount_b}) below minimums "
                    f"({amount_a_min}, {amount_b_min})"
                )

            update = PoolUpdate(
                reserve_a=(S(pool.reserve_a) - amount_a).value,
                reserve_b=(S(pool.reserve_b) - amount_b).value,
                total_shares=(supply - shares).value,
                balances={sender: held - shares},
            )
            with TransferBatch(self.ledger, self.custody, "remove_liquidity") as transfers:
                transfers.push(key.first, recipient, amount_a)
                transfers.push(key.second, recipient, amount_b)
                pool.commit(update)

        logger.info(
            "liquidity_removed",
            pair=str(key),
            sender=sender,
            recipient=recipient,
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )

        if flipped:
            return RemoveLiquidityResult(amount_a=amount_b, amount_b=amount_a)
        return RemoveLiquidityResult(amount_a=amount_a, amount_b=amount_b)
