"""Automated market maker facade.

AutomatedMarketMaker wires the pool registry, the liquidity and swap
engines and the price query to one set of collaborators. It is the entry
point for embedding the AMM and the object the HTTP API serves.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from cpamm.collaborators import (
    AssetLedger,
    Clock,
    EventSink,
    InMemoryLedger,
    LoggingEventSink,
    SystemClock,
)
from cpamm.config import AmmConfig
from cpamm.constants import CUSTODY_ACCOUNT
from cpamm.liquidity import AddLiquidityResult, LiquidityEngine, RemoveLiquidityResult
from cpamm.pools import PairKey, Pool, PoolRegistry
from cpamm.pricing import PriceQuery
from cpamm.swap import Quote, SwapEngine

logger = structlog.get_logger()


class AutomatedMarketMaker:
    """Constant-product AMM over a registry of two-asset pools.

    Args:
        ledger: Custody and transfers. Defaults to a fresh InMemoryLedger.
        clock: Time source for deadlines. Defaults to SystemClock.
        events: Receiver of swap notifications. Defaults to LoggingEventSink.
        registry: Pool registry. Defaults to an empty in-memory registry
            built with config.
        config: Pool behaviour flags. Defaults to AmmConfig().
        custody: Ledger account holding the pools' reserves. Defaults to
            the ledger's own ``custody`` attribute if it has one, and must
            match it when both are given.

    Raises:
        ValueError: If custody differs from the ledger's custody account
    """

    def __init__(
        self,
        ledger: AssetLedger | None = None,
        clock: Clock | None = None,
        events: EventSink | None = None,
        registry: PoolRegistry | None = None,
        config: AmmConfig | None = None,
        custody: str | None = None,
    ) -> None:
        if config is None:
            config = registry.config if registry is not None else AmmConfig()
        self.config = config
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.clock = clock if clock is not None else SystemClock()
        self.events = events if events is not None else LoggingEventSink()
        self.registry = registry if registry is not None else PoolRegistry(config=config)
        # push() pays out of the ledger's own custody, so pulls must land there too
        ledger_custody = getattr(self.ledger, "custody", None)
        if custody is None:
            custody = ledger_custody if ledger_custody is not None else CUSTODY_ACCOUNT
        elif ledger_custody is not None and custody != ledger_custody:
            raise ValueError(
                f"custody {custody!r} differs from the ledger's custody account {ledger_custody!r}"
            )
        self.custody = custody

        self.liquidity = LiquidityEngine(
            self.registry, self.ledger, self.clock, self.custody, config=config
        )
        self.swaps = SwapEngine(self.registry, self.ledger, self.clock, self.events, self.custody)
        self.prices = PriceQuery(self.registry, config=config)

    # --- Registry ---

    def resolve_pair(self, asset_a: str, asset_b: str) -> PairKey:
        return self.registry.resolve_pair(asset_a, asset_b)

    def get_pool(self, asset_a: str, asset_b: str) -> Pool:
        """Existing pool for a pair; raises PoolNotFound otherwise."""
        return self.registry.get_pool(self.registry.resolve_pair(asset_a, asset_b))

    # --- Liquidity ---

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
        return self.liquidity.add_liquidity(
            pair,
            amount_a_desired,
            amount_b_desired,
            amount_a_min,
            amount_b_min,
            sender,
            recipient,
            deadline,
        )

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
        return self.liquidity.remove_liquidity(
            pair, shares, amount_a_min, amount_b_min, sender, recipient, deadline
        )

    # --- Swaps ---

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
        return self.swaps.swap(
            amount_in, amount_out_min, asset_in, asset_out, sender, recipient, deadline
        )

    def swap_exact_tokens_for_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        sender: str,
        recipient: str,
        deadline: int,
    ) -> int:
        return self.swaps.swap_exact_tokens_for_tokens(
            amount_in, amount_out_min, path, sender, recipient, deadline
        )

    def quote_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return self.swaps.quote_out(amount_in, reserve_in, reserve_out)

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> Quote:
        return self.swaps.quote(asset_in, asset_out, amount_in)

    def quote_in(self, asset_in: str, asset_out: str, amount_out: int) -> Quote:
        return self.swaps.quote_in(asset_in, asset_out, amount_out)

    # --- Prices ---

    def spot_price(self, asset_a: str, asset_b: str) -> int:
        return self.prices.spot_price(asset_a, asset_b)


def _create_default_amm() -> AutomatedMarketMaker:
    """Create the process-wide AMM from environment configuration.

    - CPAMM_STATE_FILE: if set and present, pools are loaded from this
      registry snapshot
    """
    config = AmmConfig.from_env()
    state_file = os.environ.get("CPAMM_STATE_FILE")
    if state_file and Path(state_file).exists():
        logger.info("loading_registry_snapshot", path=state_file)
        registry = PoolRegistry.load(Path(state_file), config=config)
    else:
        registry = PoolRegistry(config=config)
    return AutomatedMarketMaker(registry=registry, config=config)


_default_amm: AutomatedMarketMaker | None = None


def get_default_amm() -> AutomatedMarketMaker:
    """Return the process-wide AMM, creating it on first use."""
    global _default_amm
    if _default_amm is None:
        _default_amm = _create_default_amm()
    return _default_amm
