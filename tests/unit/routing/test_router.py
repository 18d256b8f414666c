"""Tests for best-route search."""

from dataclasses import replace
from itertools import permutations

import pytest

from amm_engine.errors import AmmError, InvalidInput, NoRouteExists
from amm_engine.routing.router import Route, Router
from tests.helpers import DOT, HKO, KSM, PARA, USDT, make_pool, make_store


def _best_by_enumeration(engine, store, token_in, token_out, amount_in, max_hops):
    """Price every simple path up to max_hops and return the best (amount, hops, path)."""
    tokens = sorted({t for pair in store.all_pairs() for t in pair} - {token_in, token_out})
    best = None
    for hops in range(1, max_hops + 1):
        for middle in permutations(tokens, hops - 1):
            path = (token_in, *middle, token_out)
            try:
                amounts = engine.amounts_out(amount_in, path, store)
            except AmmError:
                continue
            key = (-amounts[-1], hops, path)
            if amounts[-1] > 0 and (best is None or key < best):
                best = key
    return best


class TestRoute:
    """Route value object."""

    def test_properties(self):
        route = Route((DOT, USDT, KSM), (1_000, 999, 998))
        assert route.amount_in == 1_000
        assert route.amount_out == 998
        assert route.hops == 2
        assert route.pairs() == [(DOT, USDT), (USDT, KSM)]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            Route((DOT, USDT), (1_000,))


class TestFindBestRoute:
    """Output maximization over the pool graph."""

    def test_two_hop_beats_shallow_direct(self, router, triangle_store):
        """The deep two-hop path outperforms the 10k direct pool."""
        route, amount_out = router.find_best_route(1_000, DOT, KSM, triangle_store.snapshot())
        assert route.path == (DOT, USDT, KSM)
        assert route.amounts == (1_000, 999, 998)
        assert amount_out == 998

    def test_direct_when_only_option(self, router, balanced_pool):
        store = make_store(balanced_pool)
        route, amount_out = router.find_best_route(1_000, DOT, USDT, store.snapshot())
        assert route.path == (DOT, USDT)
        assert amount_out == 999

    def test_hop_cap_limits_direct_only(self, router, triangle_store):
        route, amount_out = router.find_best_route(
            1_000, DOT, KSM, triangle_store.snapshot(), max_hops=1
        )
        assert route.path == (DOT, KSM)
        assert amount_out == 909

    def test_matches_exhaustive_enumeration(self, zero_fee_engine, router):
        store = make_store(
            make_pool(DOT, USDT, 1_000_000, 2_000_000),
            make_pool(USDT, KSM, 3_000_000, 1_000_000),
            make_pool(DOT, KSM, 400_000, 500_000),
            make_pool(DOT, HKO, 800_000, 800_000),
            make_pool(HKO, KSM, 900_000, 1_100_000),
        )
        for amount_in in (10, 1_000, 50_000):
            route, amount_out = router.find_best_route(amount_in, DOT, KSM, store.snapshot())
            expected = _best_by_enumeration(zero_fee_engine, store, DOT, KSM, amount_in, 3)
            assert (-amount_out, route.hops, route.path) == expected

    def test_deterministic(self, router, triangle_store):
        snapshot = triangle_store.snapshot()
        first = router.find_best_route(5_000, DOT, KSM, snapshot)
        for _ in range(3):
            assert router.find_best_route(5_000, DOT, KSM, snapshot) == first

    def test_amounts_agree_with_path_simulation(self, zero_fee_engine, router, triangle_store):
        route, _ = router.find_best_route(1_000, DOT, KSM, triangle_store.snapshot())
        assert zero_fee_engine.amounts_out(1_000, route.path, triangle_store) == list(route.amounts)

    def test_snapshot_not_mutated(self, router, triangle_store):
        snapshot = triangle_store.snapshot()
        before = list(snapshot.pools())
        router.find_best_route(1_000, DOT, KSM, snapshot)
        assert list(snapshot.pools()) == before
        assert list(triangle_store.pools()) == before


class TestTieBreaking:
    """Deterministic choice between equal outputs."""

    def test_equal_output_prefers_smaller_path(self, router):
        """Two symmetric two-hop paths: the one through the lower asset id wins."""
        store = make_store(
            make_pool(DOT, HKO),
            make_pool(HKO, KSM),
            make_pool(DOT, USDT),
            make_pool(USDT, KSM),
        )
        route, amount_out = router.find_best_route(1_000, DOT, KSM, store.snapshot())
        assert route.path == (DOT, USDT, KSM)
        assert amount_out == 998

    def test_equal_output_prefers_fewer_hops(self, router):
        store = make_store(
            make_pool(DOT, KSM, 600_000, 600_000),
            make_pool(DOT, USDT, 10**15, 10**15),
            make_pool(USDT, KSM, 10**15, 10**15),
        )
        route, amount_out = router.find_best_route(1_000, DOT, KSM, store.snapshot())
        assert amount_out == 998
        assert route.path == (DOT, KSM)


class TestSkippedPools:
    """Pools that cannot be priced are routed around."""

    def test_inactive_pool_skipped(self, router):
        store = make_store(
            make_pool(DOT, KSM, 1_000_000, 0),
            make_pool(DOT, USDT),
            make_pool(USDT, KSM),
        )
        route, _ = router.find_best_route(1_000, DOT, KSM, store.snapshot())
        assert route.path == (DOT, USDT, KSM)

    def test_only_inactive_pool(self, router):
        store = make_store(make_pool(DOT, KSM, 1_000_000, 0))
        with pytest.raises(NoRouteExists):
            router.find_best_route(1_000, DOT, KSM, store.snapshot())

    def test_dust_output_pruned(self, router):
        """An input too small to produce any output finds no route."""
        store = make_store(make_pool(DOT, USDT, 10**12, 1_000))
        with pytest.raises(NoRouteExists):
            router.find_best_route(1, DOT, USDT, store.snapshot())


class TestRouterErrors:
    """Invalid queries and unreachable assets."""

    def test_zero_amount(self, router, triangle_store):
        with pytest.raises(InvalidInput):
            router.find_best_route(0, DOT, KSM, triangle_store.snapshot())

    def test_same_token(self, router, triangle_store):
        with pytest.raises(InvalidInput):
            router.find_best_route(1_000, DOT, DOT, triangle_store.snapshot())

    @pytest.mark.parametrize("max_hops", [0, 4, 10])
    def test_hop_cap_out_of_range(self, router, triangle_store, max_hops):
        """Callers cannot raise the hop cap above the configured one."""
        with pytest.raises(InvalidInput):
            router.find_best_route(
                1_000, DOT, KSM, triangle_store.snapshot(), max_hops=max_hops
            )

    def test_unknown_token(self, router, triangle_store):
        with pytest.raises(NoRouteExists):
            router.find_best_route(1_000, DOT, PARA, triangle_store.snapshot())

    def test_beyond_hop_cap(self, router, zero_fee_config):
        store = make_store(
            make_pool(DOT, USDT),
            make_pool(USDT, KSM),
            make_pool(KSM, HKO),
            make_pool(HKO, PARA),
        )
        with pytest.raises(NoRouteExists):
            router.find_best_route(1_000, DOT, PARA, store.snapshot())

        wide_router = Router(config=replace(zero_fee_config, max_hops=4))
        route, _ = wide_router.find_best_route(1_000, DOT, PARA, store.snapshot())
        assert route.path == (DOT, USDT, KSM, HKO, PARA)

    def test_default_router_charges_default_fee(self, triangle_store):
        _, amount_out = Router().find_best_route(1_000, DOT, USDT, triangle_store.snapshot())
        assert amount_out == 996
