"""Storage backends for pool records.

The registry only talks to the PoolStore protocol, so a deployment can swap
the in-memory dictionary for a transactional or persisted store.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from cpamm.pools.pool import Pool
from cpamm.pools.types import PairKey


@runtime_checkable
class PoolStore(Protocol):
    """Keyed storage for Pool records."""

    def get(self, key: PairKey) -> Pool | None:
        """Return the pool for key, or None if it was never created."""
        ...

    def put(self, pool: Pool) -> None:
        """Insert or replace the pool stored under pool.key."""
        ...

    def keys(self) -> Iterator[PairKey]:
        """Iterate over all stored keys."""
        ...

    def __len__(self) -> int: ...


class InMemoryPoolStore:
    """Process-local dictionary store."""

    def __init__(self) -> None:
        self._pools: dict[PairKey, Pool] = {}

    def get(self, key: PairKey) -> Pool | None:
        return self._pools.get(key)

    def put(self, pool: Pool) -> None:
        self._pools[pool.key] = pool

    def keys(self) -> Iterator[PairKey]:
        return iter(list(self._pools))

    def __len__(self) -> int:
        return len(self._pools)
