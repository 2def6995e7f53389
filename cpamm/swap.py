"""Swap engine: quotes and exact-input swaps against a single pool.

Formula: amount_out = (amount_in * reserve_out) // (reserve_in + amount_in)

There is no fee, so the pool's constant product only grows through the
floor rounding of each output.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from cpamm.collaborators import AssetLedger, Clock, EventSink
from cpamm.errors import SlippageExceeded, UnsupportedPath
from cpamm.guards import ensure_deadline, ensure_non_negative, ensure_positive
from cpamm.math import constant_product_in, constant_product_out
from cpamm.models.types import normalize_asset
from cpamm.pools import PoolRegistry, PoolUpdate
from cpamm.safe_int import S
from cpamm.transfers import TransferBatch

logger = structlog.get_logger()


@dataclass(frozen=True)
class Quote:
    """Result of pricing a swap. Never stored."""

    amount_in: int
    amount_out: int


class SwapEngine:
    """Exact-input swaps over direct two-asset pairs."""

    def __init__(
        self,
        registry: PoolRegistry,
        ledger: AssetLedger,
        clock: Clock,
        events: EventSink,
        custody: str,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.clock = clock
        self.events = events
        self.custody = custody

    def quote_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Price amount_in against explicit reserves."""
        return constant_product_out(amount_in, reserve_in, reserve_out)

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> Quote:
        """Price a swap against the live reserves of an existing pool.

        Raises:
            UnsupportedPath: If asset_in and asset_out are the same asset
            PoolNotFound: If the pair has no pool
            InvalidInput: If amount_in <= 0
            InvalidReserves: If the pool is empty
        """
        key = self.registry.resolve_pair(asset_in, asset_out)
        with self.registry.view(key) as pool:
            reserve_in, reserve_out = pool.get_reserves(normalize_asset(asset_in))
            amount_out = constant_product_out(amount_in, reserve_in, reserve_out)
        return Quote(amount_in=amount_in, amount_out=amount_out)

    def quote_in(self, asset_in: str, asset_out: str, amount_out: int) -> Quote:
        """Input of asset_in needed to receive exactly amount_out of asset_out.

        Selling the returned amount_in through swap() pays at least amount_out.

        Raises:
            UnsupportedPath: If asset_in and asset_out are the same asset
            PoolNotFound: If the pair has no pool
            InvalidInput: If amount_out <= 0
            InvalidReserves: If the pool is empty
            InsufficientLiquidity: If amount_out would drain the output reserve
        """
        key = self.registry.resolve_pair(asset_in, asset_out)
        with self.registry.view(key) as pool:
            reserve_in, reserve_out = pool.get_reserves(normalize_asset(asset_in))
            amount_in = constant_product_in(amount_out, reserve_in, reserve_out)
        return Quote(amount_in=amount_in, amount_out=amount_out)

    def swap(
        self,
        amount_in: int,
        amount_out_min: int,
        asset_in: str,
        asset_out: str,
        sender: str,
        recipient: str,
        deadline: int,
    ) -> int:
        """Sell exactly amount_in of asset_in for asset_out.

        Args:
            amount_in: Amount of asset_in to sell
            amount_out_min: Minimum acceptable output (slippage protection)
            asset_in: Asset paid into the pool
            asset_out: Asset received from the pool
            sender: Account paying amount_in; reported as the initiator
            recipient: Account receiving the output
            deadline: Latest timestamp at which the swap may execute

        Returns:
            Amount of asset_out sent to recipient

        Raises:
            DeadlineExpired: If the clock has passed deadline
            UnsupportedPath: If asset_in and asset_out are the same asset
            InvalidAmount: If amount_in <= 0 or amount_out_min < 0
            InvalidReserves: If the pool is empty
            SlippageExceeded: If the output is below amount_out_min
            TransferFailed: If the ledger refuses a transfer
        """
        ensure_deadline(self.clock, deadline)
        return self._swap(amount_in, amount_out_min, asset_in, asset_out, sender, recipient)

    def swap_exact_tokens_for_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        sender: str,
        recipient: str,
        deadline: int,
    ) -> int:
        """Path form of swap(); only direct paths of exactly two assets are accepted.

        Raises:
            UnsupportedPath: If path does not have exactly two entries
        """
        ensure_deadline(self.clock, deadline)
        if len(path) != 2:
            raise UnsupportedPath(f"Only direct swaps are supported, got a path of {len(path)}")
        return self._swap(amount_in, amount_out_min, path[0], path[1], sender, recipient)

    def _swap(
        self,
        amount_in: int,
        amount_out_min: int,
        asset_in: str,
        asset_out: str,
        sender: str,
        recipient: str,
    ) -> int:
        key = self.registry.resolve_pair(asset_in, asset_out)
        ensure_positive("amount_in", amount_in)
        ensure_non_negative("amount_out_min", amount_out_min)
        token_in = normalize_asset(asset_in)
        token_out = normalize_asset(asset_out)

        with self.registry.locked(key) as pool:
            # Reserves are read relative to the requested direction, not storage order
            reserve_in, reserve_out = pool.get_reserves(token_in)
            amount_out = constant_product_out(amount_in, reserve_in, reserve_out)
            if amount_out < amount_out_min:
                logger.warning(
                    "swap_rejected",
                    pair=str(key),
                    amount_in=amount_in,
                    amount_out=amount_out,
                    amount_out_min=amount_out_min,
                )
                raise SlippageExceeded(f"Output {amount_out} below minimum {amount_out_min}")

            new_in = (S(reserve_in) + amount_in).value
            new_out = (S(reserve_out) - amount_out).value
            if pool.is_first(token_in):
                reserve_a, reserve_b = new_in, new_out
            else:
                reserve_a, reserve_b = new_out, new_in

            update = PoolUpdate(
                reserve_a=reserve_a,
                reserve_b=reserve_b,
                total_shares=pool.total_shares,
            )
            with TransferBatch(self.ledger, self.custody, "swap") as transfers:
                transfers.pull(token_in, sender, amount_in)
                transfers.push(token_out, recipient, amount_out)
                pool.commit(update)

        logger.debug(
            "swap_executed",
            pair=str(key),
            asset_in=token_in,
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
        )

        try:
            self.events.notify_swap(sender, token_in, token_out, amount_in, amount_out)
        except Exception:
            # The swap is committed; a notification failure must not undo it
            logger.exception("swap_notification_failed", pair=str(key))

        return amount_out
