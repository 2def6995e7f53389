"""Spot price query over pool reserves."""

from __future__ import annotations

from cpamm.config import DEFAULT_AMM_CONFIG, AmmConfig
from cpamm.errors import EmptyPool
from cpamm.models.types import normalize_asset
from cpamm.pools import PoolRegistry
from cpamm.safe_int import S


class PriceQuery:
    """Read-only projection of a pool's marginal price."""

    def __init__(self, registry: PoolRegistry, config: AmmConfig = DEFAULT_AMM_CONFIG) -> None:
        self.registry = registry
        self.config = config

    def spot_price(self, asset_a: str, asset_b: str) -> int:
        """Amount of asset_b worth one unit of asset_a, scaled by price_scale.

        Formula: reserve_b * price_scale // reserve_a, with reserves oriented
        to the caller's (asset_a, asset_b) order.

        Raises:
            PoolNotFound: If the pair has no pool
            EmptyPool: If either reserve is zero
        """
        key = self.registry.resolve_pair(asset_a, asset_b)
        with self.registry.view(key) as pool:
            reserve_a, reserve_b = pool.get_reserves(normalize_asset(asset_a))
        if reserve_a == 0 or reserve_b == 0:
            raise EmptyPool(f"Pool {key} has reserves ({reserve_a}, {reserve_b})")
        return (S(reserve_b) * self.config.price_scale // S(reserve_a)).value
