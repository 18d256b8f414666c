"""Pool storage keyed by unordered asset pair.

PoolStore is the only writer of reserves. Readers that need a consistent
view across several lookups (the router) take a PoolGraphSnapshot, which is
immutable and unaffected by later writes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

import structlog

from amm_engine.curves.base import Curve
from amm_engine.curves.constant_product import CONSTANT_PRODUCT
from amm_engine.errors import PoolAlreadyExists, PoolAssetMismatch, PoolDoesNotExist
from amm_engine.math.fixed_point import Rate
from amm_engine.pools.types import AssetId, Pool

logger = structlog.get_logger()

if TYPE_CHECKING:
    from amm_engine.routing.graph import TokenGraph

PairKey = frozenset[AssetId]


def pair_key(a: AssetId, b: AssetId) -> PairKey:
    return frozenset((a, b))


class PoolGraphSnapshot:
    """Read-only view of every pool at one point in time.

    Provides the same ``get``/``all_pairs`` lookups as PoolStore plus the
    token graph the router searches.
    """

    def __init__(self, pools: Mapping[PairKey, Pool]) -> None:
        self._pools: Mapping[PairKey, Pool] = MappingProxyType(dict(pools))
        self._graph: TokenGraph | None = None

    def get(self, a: AssetId, b: AssetId) -> Pool | None:
        return self._pools.get(pair_key(a, b))

    def all_pairs(self) -> Iterator[tuple[AssetId, AssetId]]:
        for pool in self._pools.values():
            yield pool.pair

    def pools(self) -> Iterator[Pool]:
        yield from self._pools.values()

    @property
    def graph(self) -> TokenGraph:
        """Token adjacency graph (lazily built, cached)."""
        if self._graph is None:
            from amm_engine.routing.graph import TokenGraph

            self._graph = TokenGraph.from_pairs(self.all_pairs())
        return self._graph

    def __len__(self) -> int:
        return len(self._pools)


class PoolStore:
    """In-memory persistent mapping from asset pair to Pool.

    ``get(a, b)`` and ``get(b, a)`` resolve to the same record. The base/quote
    assignment of a stored pool never changes.
    """

    def __init__(self, pools: list[Pool] | None = None) -> None:
        """Initialize the store with optional pools.

        Args:
            pools: Initial pools. Each pair may appear once.
        """
        self._pools: dict[PairKey, Pool] = {}
        if pools:
            for pool in pools:
                self.put(pool.base_asset, pool.quote_asset, pool)

    def get(self, a: AssetId, b: AssetId) -> Pool | None:
        """Get the pool for a pair (order independent)."""
        return self._pools.get(pair_key(a, b))

    def require(self, a: AssetId, b: AssetId) -> Pool:
        """Get the pool for a pair.

        Raises:
            PoolDoesNotExist: If no pool is stored for the pair
        """
        pool = self.get(a, b)
        if pool is None:
            raise PoolDoesNotExist(f"No pool for pair ({a}, {b})")
        return pool

    def put(self, a: AssetId, b: AssetId, pool: Pool) -> None:
        """Store a pool, replacing any existing record for the pair.

        Raises:
            PoolAssetMismatch: If pool's assets differ from (a, b), or if an
                existing record has base and quote the other way round
        """
        key = pair_key(a, b)
        if key != pair_key(pool.base_asset, pool.quote_asset):
            raise PoolAssetMismatch(f"Pool {pool.pair} stored under key ({a}, {b})")

        existing = self._pools.get(key)
        if existing is not None:
            if existing.base_asset != pool.base_asset:
                raise PoolAssetMismatch(
                    f"Pool {pool.pair} would swap base/quote of stored {existing.pair}"
                )
            logger.debug(
                "pool_replaced",
                base_asset=pool.base_asset,
                quote_asset=pool.quote_asset,
                base_amount=pool.base_amount,
                quote_amount=pool.quote_amount,
            )
        self._pools[key] = pool

    def create_pool(
        self,
        base_asset: AssetId,
        quote_asset: AssetId,
        base_amount: int,
        quote_amount: int,
        pool_assets: AssetId,
        curve: Curve = CONSTANT_PRODUCT,
        fee_rate: Rate | None = None,
    ) -> Pool:
        """Register a new pool.

        Raises:
            PoolAlreadyExists: If a pool is already stored for the pair
        """
        if self.get(base_asset, quote_asset) is not None:
            raise PoolAlreadyExists(f"Pool for pair ({base_asset}, {quote_asset}) already exists")
        pool = Pool(
            base_asset=base_asset,
            quote_asset=quote_asset,
            base_amount=base_amount,
            quote_amount=quote_amount,
            pool_assets=pool_assets,
            curve=curve,
            fee_rate=fee_rate,
        )
        self._pools[pair_key(base_asset, quote_asset)] = pool
        logger.debug(
            "pool_created",
            base_asset=base_asset,
            quote_asset=quote_asset,
            curve=curve.name,
            pool_assets=pool_assets,
        )
        return pool

    def mutate(self, a: AssetId, b: AssetId, fn: Callable[[Pool], Pool]) -> Pool:
        """Replace the pool for (a, b) with fn(pool) and return the new record.

        Raises:
            PoolDoesNotExist: If no pool is stored for the pair
            PoolAssetMismatch: If fn changes the pool's assets
        """
        new_pool = fn(self.require(a, b))
        self.put(a, b, new_pool)
        return new_pool

    def all_pairs(self) -> Iterator[tuple[AssetId, AssetId]]:
        """Yield (base, quote) for every stored pool, in insertion order."""
        for pool in self._pools.values():
            yield pool.pair

    def pools(self) -> list[Pool]:
        return list(self._pools.values())

    def snapshot(self) -> PoolGraphSnapshot:
        """Take an immutable view of the current pool state."""
        return PoolGraphSnapshot(self._pools)

    def __len__(self) -> int:
        return len(self._pools)


_default_store: PoolStore | None = None


def get_default_store() -> PoolStore:
    """Process-wide store used by the query API when none is injected."""
    global _default_store
    if _default_store is None:
        _default_store = PoolStore()
    return _default_store
