"""Pool management package.

Provides the Pool record and the PoolRegistry that owns all pools.
"""

from .pool import Pool, PoolUpdate
from .registry import PoolRegistry, pool_state
from .store import InMemoryPoolStore, PoolStore
from .types import PairKey

__all__ = [
    "Pool",
    "PoolUpdate",
    "PoolRegistry",
    "pool_state",
    "PoolStore",
    "InMemoryPoolStore",
    "PairKey",
]
