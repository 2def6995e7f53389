"""Pool key type definitions."""

from typing import NamedTuple

from cpamm.constants import PAIR_SEPARATOR


class PairKey(NamedTuple):
    """Key of a pool in the registry.

    ``first`` and ``second`` are the pool's storage order: reserve_a belongs
    to ``first`` and reserve_b to ``second``.
    """

    first: str
    second: str

    def __str__(self) -> str:
        return f"{self.first}{PAIR_SEPARATOR}{self.second}"

    def contains(self, asset: str) -> bool:
        return asset == self.first or asset == self.second


__all__ = ["PairKey"]
