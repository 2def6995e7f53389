"""Pool record holding reserves and liquidity shares for one pair."""

from __future__ import annotations

from dataclasses import dataclass, field

from cpamm.errors import InvariantViolation, UnsupportedPath
from cpamm.pools.types import PairKey


@dataclass(frozen=True)
class PoolUpdate:
    """Staged new values for a pool, committed only after transfers succeed.

    Attributes:
        reserve_a: New reserve of the pool's first asset
        reserve_b: New reserve of the pool's second asset
        total_shares: New share supply
        balances: New share balance per affected provider
    """

    reserve_a: int
    reserve_b: int
    total_shares: int
    balances: dict[str, int] = field(default_factory=dict)


@dataclass
class Pool:
    """Reserves and share accounting for one pair.

    reserve_a always belongs to ``key.first`` and reserve_b to ``key.second``.
    Only LiquidityEngine and SwapEngine mutate a pool, through commit().
    """

    key: PairKey
    reserve_a: int = 0
    reserve_b: int = 0
    total_shares: int = 0
    share_balance: dict[str, int] = field(default_factory=dict)

    @property
    def asset_a(self) -> str:
        return self.key.first

    @property
    def asset_b(self) -> str:
        return self.key.second

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def shares_of(self, provider: str) -> int:
        return self.share_balance.get(provider, 0)

    def get_reserves(self, asset_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out).

        Raises:
            UnsupportedPath: If asset_in is not one of the pool's assets
        """
        if asset_in == self.key.first:
            return self.reserve_a, self.reserve_b
        elif asset_in == self.key.second:
            return self.reserve_b, self.reserve_a
        else:
            raise UnsupportedPath(f"Asset {asset_in} not in pool {self.key}")

    def is_first(self, asset: str) -> bool:
        """True if ``asset`` is stored in the reserve_a slot.

        Raises:
            UnsupportedPath: If asset is not one of the pool's assets
        """
        if not self.key.contains(asset):
            raise UnsupportedPath(f"Asset {asset} not in pool {self.key}")
        return asset == self.key.first

    def commit(self, update: PoolUpdate) -> None:
        """Apply a staged update after verifying it keeps the invariants.

        Raises:
            InvariantViolation: If the staged values are inconsistent. The
                pool is left unchanged.
        """
        balances = dict(self.share_balance)
        for provider, shares in update.balances.items():
            if shares:
                balances[provider] = shares
            else:
                balances.pop(provider, None)

        _check(update.reserve_a, update.reserve_b, update.total_shares, balances, self.key)

        self.reserve_a = update.reserve_a
        self.reserve_b = update.reserve_b
        self.total_shares = update.total_shares
        self.share_balance = balances

    def check_invariants(self) -> None:
        """Raise InvariantViolation if reserves and shares are inconsistent."""
        _check(self.reserve_a, self.reserve_b, self.total_shares, self.share_balance, self.key)


def _check(
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
    balances: dict[str, int],
    key: PairKey,
) -> None:
    if reserve_a < 0 or reserve_b < 0 or total_shares < 0:
        raise InvariantViolation(f"Negative reserve or supply in pool {key}")
    if any(shares < 0 for shares in balances.values()):
        raise InvariantViolation(f"Negative share balance in pool {key}")
    if sum(balances.values()) != total_shares:
        raise InvariantViolation(
            f"Share balances sum to {sum(balances.values())}, supply is {total_shares} in pool {key}"
        )
    # A funded pool has both reserves and outstanding shares, an empty one has none
    funded = reserve_a > 0 and reserve_b > 0
    empty = reserve_a == 0 and reserve_b == 0
    if total_shares == 0 and not empty:
        raise InvariantViolation(f"Pool {key} holds reserves without shares")
    if total_shares > 0 and not funded:
        raise InvariantViolation(f"Pool {key} has shares but a zero reserve")
