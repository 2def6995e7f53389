"""Pool registry mapping pair keys to pool records.

The registry owns every Pool. Pools are created lazily on first reference
and never removed: an emptied pool stays addressable and can be re-funded.
Each pair key has its own lock, so operations on one pool are serialized
while operations on different pools run in parallel.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from cpamm.config import DEFAULT_AMM_CONFIG, AmmConfig
from cpamm.errors import InvalidInput, PoolNotFound, UnsupportedPath
from cpamm.models.pool import PoolState, RegistrySnapshot
from cpamm.models.types import normalize_asset
from cpamm.pools.pool import Pool
from cpamm.pools.store import InMemoryPoolStore, PoolStore
from cpamm.pools.types import PairKey

logger = structlog.get_logger()


def pool_state(pool: Pool) -> PoolState:
    """Serializable copy of a pool's state."""
    return PoolState(
        asset_a=pool.asset_a,
        asset_b=pool.asset_b,
        reserve_a=str(pool.reserve_a),
        reserve_b=str(pool.reserve_b),
        total_shares=str(pool.total_shares),
        share_balance={p: str(s) for p, s in pool.share_balance.items()},
    )


class PoolRegistry:
    """Registry of constant-product pools keyed by asset pair."""

    def __init__(
        self,
        store: PoolStore | None = None,
        config: AmmConfig = DEFAULT_AMM_CONFIG,
    ) -> None:
        """Initialize the registry.

        Args:
            store: Backing store. If None, an InMemoryPoolStore is used.
            config: Controls whether pair keys are canonicalized.
        """
        self._store: PoolStore = store if store is not None else InMemoryPoolStore()
        self._config = config
        # Guards pool creation and the lock table itself
        self._registry_lock = threading.Lock()
        self._locks: dict[PairKey, threading.Lock] = {}

    @property
    def config(self) -> AmmConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._store)

    def resolve_pair(self, asset_a: str, asset_b: str) -> PairKey:
        """Derive the pair key for two assets.

        With canonical pairs (the default) the identifiers are sorted, so the
        result does not depend on argument order.

        Raises:
            InvalidInput: If an identifier is empty
            UnsupportedPath: If both identifiers name the same asset
        """
        a = normalize_asset(asset_a)
        b = normalize_asset(asset_b)
        if not a or not b:
            raise InvalidInput(f"Asset identifiers must be non-empty: {asset_a!r}, {asset_b!r}")
        if a == b:
            raise UnsupportedPath(f"A pair needs two distinct assets, got {a} twice")
        if self._config.canonical_pairs and b < a:
            a, b = b, a
        return PairKey(a, b)

    def get_or_create_pool(self, key: PairKey) -> Pool:
        """Return the pool for key, inserting a zero-initialized one if missing."""
        pool = self._store.get(key)
        if pool is not None:
            return pool
        with self._registry_lock:
            pool = self._store.get(key)
            if pool is None:
                pool = Pool(key=key)
                self._store.put(pool)
                logger.debug("pool_created", pair=str(key))
            return pool

    def get_pool(self, key: PairKey) -> Pool:
        """Look up an existing pool without creating one.

        Raises:
            PoolNotFound: If no pool exists for key
        """
        pool = self._store.get(key)
        if pool is None:
            raise PoolNotFound(f"No pool for pair {key}")
        return pool

    def pools(self) -> Iterator[Pool]:
        for key in self._store.keys():
            pool = self._store.get(key)
            if pool is not None:
                yield pool

    def _lock_for(self, key: PairKey) -> threading.Lock:
        lock = self._locks.get(key)
        if lock is None:
            with self._registry_lock:
                lock = self._locks.setdefault(key, threading.Lock())
        return lock

    @contextmanager
    def locked(self, key: PairKey) -> Iterator[Pool]:
        """Hold the pair's lock and yield its pool (created if missing).

        The pool is written back to the store on exit so that non-memory
        stores observe the committed state.
        """
        with self._lock_for(key):
            pool = self.get_or_create_pool(key)
            yield pool
            self._store.put(pool)

    @contextmanager
    def view(self, key: PairKey) -> Iterator[Pool]:
        """Hold the pair's lock and yield its existing pool for reading.

        Raises:
            PoolNotFound: If no pool exists for key
        """
        with self._lock_for(key):
            yield self.get_pool(key)

    # --- Persistence ---

    def snapshot(self) -> RegistrySnapshot:
        """Capture every pool as a serializable snapshot."""
        states = []
        for pool in self.pools():
            with self._lock_for(pool.key):
                states.append(pool_state(pool))
        return RegistrySnapshot(canonical_pairs=self._config.canonical_pairs, pools=states)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: RegistrySnapshot,
        store: PoolStore | None = None,
        config: AmmConfig | None = None,
    ) -> PoolRegistry:
        """Rebuild a registry from a snapshot, re-checking every pool's invariants.

        Raises:
            InvariantViolation: If a stored pool is inconsistent
            ValueError: If the snapshot's pairing scheme does not match config
        """
        if config is None:
            config = AmmConfig(canonical_pairs=snapshot.canonical_pairs)
        elif config.canonical_pairs != snapshot.canonical_pairs:
            raise ValueError(
                f"Snapshot canonical_pairs={snapshot.canonical_pairs} "
                f"does not match config canonical_pairs={config.canonical_pairs}"
            )

        registry = cls(store=store, config=config)
        for state in snapshot.pools:
            key = PairKey(state.asset_a, state.asset_b)
            pool = Pool(
                key=key,
                reserve_a=int(state.reserve_a),
                reserve_b=int(state.reserve_b),
                total_shares=int(state.total_shares),
                share_balance={p: int(s) for p, s in state.share_balance.items() if int(s) > 0},
            )
            pool.check_invariants()
            registry._store.put(pool)

        logger.info("registry_loaded", pool_count=len(registry))
        return registry

    def save(self, path: Path) -> None:
        """Write the registry snapshot to path as JSON."""
        path.write_text(self.snapshot().model_dump_json(by_alias=True, indent=2))
        logger.info("registry_saved", path=str(path), pool_count=len(self))

    @classmethod
    def load(cls, path: Path, config: AmmConfig | None = None) -> PoolRegistry:
        """Read a registry snapshot written by save()."""
        snapshot = RegistrySnapshot.model_validate_json(path.read_text())
        return cls.from_snapshot(snapshot, config=config)
