"""Tests for TokenGraph."""

from amm_engine.routing.graph import TokenGraph
from tests.helpers import DOT, HKO, KSM, PARA, USDT


class TestTokenGraph:
    """Adjacency and neighbor ordering."""

    def test_edges_are_bidirectional(self):
        graph = TokenGraph.from_pairs([(DOT, USDT)])
        assert graph.neighbors(DOT) == (USDT,)
        assert graph.neighbors(USDT) == (DOT,)

    def test_neighbors_sorted(self):
        graph = TokenGraph.from_pairs([(DOT, PARA), (DOT, KSM), (HKO, DOT)])
        assert graph.neighbors(DOT) == (KSM, HKO, PARA)

    def test_neighbors_refresh_after_add(self):
        graph = TokenGraph.from_pairs([(DOT, PARA)])
        assert graph.neighbors(DOT) == (PARA,)
        graph.add_edge(DOT, KSM)
        assert graph.neighbors(DOT) == (KSM, PARA)

    def test_unknown_token(self):
        graph = TokenGraph()
        assert graph.neighbors(DOT) == ()
        assert not graph.has_token(DOT)

    def test_has_token(self):
        graph = TokenGraph.from_pairs([(DOT, USDT)])
        assert graph.has_token(DOT)
        assert graph.has_token(USDT)
        assert not graph.has_token(KSM)

