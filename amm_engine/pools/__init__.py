"""Pool records and storage."""

from amm_engine.pools.store import PoolGraphSnapshot, PoolStore, get_default_store, pair_key
from amm_engine.pools.types import AssetId, Pool

__all__ = [
    "AssetId",
    "Pool",
    "PoolStore",
    "PoolGraphSnapshot",
    "get_default_store",
    "pair_key",
]
