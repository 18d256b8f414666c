"""Tests for PoolStore and PoolGraphSnapshot."""

from dataclasses import replace

import pytest

from amm_engine.curves import StableSwapCurve
from amm_engine.errors import PoolAlreadyExists, PoolAssetMismatch, PoolDoesNotExist
from amm_engine.pools.store import PoolStore
from amm_engine.pools.types import Pool
from tests.helpers import DOT, HKO, KSM, USDT, make_pool, make_store


class TestPool:
    """Tests for the Pool record."""

    def test_persisted_field_order(self):
        """base_amount, quote_amount and pool_assets keep their stored order."""
        names = [f for f in Pool.__dataclass_fields__]
        assert names.index("base_amount") < names.index("quote_amount") < names.index("pool_assets")

    def test_active(self):
        assert make_pool().is_active
        assert not make_pool(quote_amount=0).is_active

    def test_reserve_lookup(self):
        pool = make_pool(DOT, USDT, 10, 20)
        assert pool.reserve_of(DOT) == 10
        assert pool.reserve_of(USDT) == 20
        assert pool.other_asset(DOT) == USDT

    def test_same_asset_rejected(self):
        with pytest.raises(ValueError):
            make_pool(DOT, DOT)

    def test_negative_reserve_rejected(self):
        with pytest.raises(ValueError):
            make_pool(base_amount=-1)

    def test_hashable(self):
        pool = make_pool(pool_assets=1, curve=StableSwapCurve(50))
        assert hash(pool) == hash(make_pool(pool_assets=1, curve=StableSwapCurve(50)))


class TestPoolStoreLookup:
    """Order-independent lookups."""

    def test_get_either_order(self):
        pool = make_pool(DOT, USDT)
        store = make_store(pool)
        assert store.get(DOT, USDT) is pool
        assert store.get(USDT, DOT) is pool

    def test_get_missing(self):
        assert PoolStore().get(DOT, USDT) is None

    def test_require_missing(self):
        with pytest.raises(PoolDoesNotExist):
            PoolStore().require(DOT, USDT)


class TestPoolStoreWrites:
    """put / create_pool / mutate."""

    def test_put_replaces(self):
        store = make_store(make_pool(DOT, USDT, 100, 100))
        store.put(USDT, DOT, make_pool(DOT, USDT, 200, 50))
        assert store.get(DOT, USDT).base_amount == 200
        assert len(store) == 1

    def test_put_wrong_key(self):
        store = PoolStore()
        with pytest.raises(PoolAssetMismatch):
            store.put(DOT, KSM, make_pool(DOT, USDT))

    def test_put_cannot_swap_base_and_quote(self):
        store = make_store(make_pool(DOT, USDT))
        with pytest.raises(PoolAssetMismatch):
            store.put(DOT, USDT, make_pool(USDT, DOT))

    def test_create_pool(self):
        store = PoolStore()
        pool = store.create_pool(DOT, USDT, 1_000, 2_000, 9)
        assert store.get(USDT, DOT) == pool
        assert pool.pool_assets == 9

    def test_create_pool_duplicate(self):
        store = PoolStore()
        store.create_pool(DOT, USDT, 1_000, 2_000, 9)
        with pytest.raises(PoolAlreadyExists):
            store.create_pool(USDT, DOT, 1_000, 2_000, 10)

    def test_mutate(self):
        store = make_store(make_pool(DOT, USDT, 100, 100))
        new_pool = store.mutate(DOT, USDT, lambda p: replace(p, quote_amount=7))
        assert new_pool.quote_amount == 7
        assert store.get(DOT, USDT).quote_amount == 7

    def test_mutate_missing(self):
        with pytest.raises(PoolDoesNotExist):
            PoolStore().mutate(DOT, USDT, lambda p: p)


class TestAllPairs:
    """Pair enumeration."""

    def test_insertion_order(self):
        store = make_store(make_pool(DOT, USDT), make_pool(KSM, DOT), make_pool(USDT, HKO))
        assert list(store.all_pairs()) == [(DOT, USDT), (KSM, DOT), (USDT, HKO)]

    def test_restartable(self):
        """Each call yields a fresh, identical sequence."""
        store = make_store(make_pool(DOT, USDT), make_pool(KSM, DOT))
        assert list(store.all_pairs()) == list(store.all_pairs())

    def test_lazy(self):
        store = make_store(make_pool(DOT, USDT))
        pairs = store.all_pairs()
        assert next(pairs) == (DOT, USDT)
        with pytest.raises(StopIteration):
            next(pairs)


class TestSnapshot:
    """Immutable snapshots."""

    def test_isolated_from_later_writes(self):
        store = make_store(make_pool(DOT, USDT, 100, 100))
        snapshot = store.snapshot()
        store.put(DOT, USDT, make_pool(DOT, USDT, 1, 1))
        store.create_pool(DOT, KSM, 5, 5, 77)
        assert snapshot.get(DOT, USDT).base_amount == 100
        assert snapshot.get(DOT, KSM) is None
        assert len(snapshot) == 1

    def test_graph(self):
        snapshot = make_store(make_pool(DOT, USDT), make_pool(KSM, DOT)).snapshot()
        assert snapshot.graph.neighbors(DOT) == (KSM, USDT)
        assert snapshot.graph is snapshot.graph
