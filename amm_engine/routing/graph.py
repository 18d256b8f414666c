"""Token graph for route search.

Assets are nodes and pools are undirected edges. Neighbor lists are
returned sorted so that every traversal visits assets in the same order.
"""

from __future__ import annotations

from collections.abc import Iterable

from amm_engine.pools.types import AssetId


class TokenGraph:
    """Adjacency-list graph of assets connected by pools."""

    def __init__(self) -> None:
        self._adjacency: dict[AssetId, set[AssetId]] = {}
        self._sorted: dict[AssetId, tuple[AssetId, ...]] = {}

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[AssetId, AssetId]]) -> TokenGraph:
        """Build a graph with one edge per pair."""
        graph = cls()
        for a, b in pairs:
            graph.add_edge(a, b)
        return graph

    def add_edge(self, a: AssetId, b: AssetId) -> None:
        """Add a bidirectional edge between two assets."""
        self._adjacency.setdefault(a, set()).add(b)
        self._adjacency.setdefault(b, set()).add(a)
        self._sorted.pop(a, None)
        self._sorted.pop(b, None)

    def neighbors(self, asset: AssetId) -> tuple[AssetId, ...]:
        """Assets sharing a pool with asset, in ascending order."""
        cached = self._sorted.get(asset)
        if cached is None:
            cached = tuple(sorted(self._adjacency.get(asset, ())))
            self._sorted[asset] = cached
        return cached

    def has_token(self, asset: AssetId) -> bool:
        return asset in self._adjacency

