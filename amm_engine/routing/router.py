"""Best-route search across the pool graph.

The router evaluates every simple path of up to ``max_hops`` pools from
token_in to token_out, pricing each hop with SwapEngine against an immutable
snapshot, and keeps the path with the largest final output.

Amounts of different assets are not comparable, so an intermediate amount
says nothing about how a partial path will finish. The only pruning is
structural (hop cap, no revisited asset) plus dropping partial paths whose
amount has fallen to zero or whose next hop cannot be priced.

Ties resolve deterministically: larger amount_out, then fewer hops, then
the lexicographically smaller asset sequence.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from amm_engine.config import DEFAULT_CONFIG, EngineConfig
from amm_engine.errors import InvalidInput, MathError, NoRouteExists, SwapError
from amm_engine.math.fixed_point import Rate
from amm_engine.pools.store import PoolGraphSnapshot
from amm_engine.pools.types import AssetId
from amm_engine.swap import SwapEngine

logger = structlog.get_logger()


@dataclass(frozen=True)
class Route:
    """A path through the pool graph with the amount realized at each step.

    Attributes:
        path: Assets traversed, token_in first and token_out last
        amounts: Amount held after each step; amounts[0] is the input
    """

    path: tuple[AssetId, ...]
    amounts: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.path) != len(self.amounts):
            raise ValueError("path and amounts must have equal length")

    @property
    def amount_in(self) -> int:
        return self.amounts[0]

    @property
    def amount_out(self) -> int:
        return self.amounts[-1]

    @property
    def hops(self) -> int:
        return len(self.path) - 1

    def pairs(self) -> list[tuple[AssetId, AssetId]]:
        """Consecutive (asset_in, asset_out) pairs, one per pool traversed."""
        return list(zip(self.path, self.path[1:]))

    def sort_key(self) -> tuple[int, int, tuple[AssetId, ...]]:
        """Smaller is better."""
        return (-self.amount_out, self.hops, self.path)


class Router:
    """Finds the output-maximizing route for a trade.

    Args:
        engine: Swap engine used to price each hop
        config: Supplies the default hop cap
    """

    def __init__(
        self,
        engine: SwapEngine | None = None,
        config: EngineConfig = DEFAULT_CONFIG,
    ) -> None:
        self.config = config
        self.engine = engine or SwapEngine(config)

    def find_best_route(
        self,
        amount_in: int,
        token_in: AssetId,
        token_out: AssetId,
        snapshot: PoolGraphSnapshot,
        max_hops: int | None = None,
        fee_rate: Rate | None = None,
    ) -> tuple[Route, int]:
        """Find the path from token_in to token_out with the largest output.

        Args:
            amount_in: Input amount of token_in
            token_in: Asset sold
            token_out: Asset bought
            snapshot: Pool state to price against (never mutated)
            max_hops: Hop cap, at most config.max_hops (the default)
            fee_rate: Fee override for every hop

        Returns:
            (route, amount_out)

        Raises:
            InvalidInput: If amount_in is not positive, token_in == token_out,
                or max_hops is outside [1, config.max_hops]
            NoRouteExists: If no priced path connects the assets within max_hops
        """
        if amount_in <= 0:
            raise InvalidInput(f"amount_in must be positive, got {amount_in}")
        if token_in == token_out:
            raise InvalidInput(f"token_in and token_out are both {token_in}")

        hop_cap = self.config.max_hops if max_hops is None else max_hops
        if not 1 <= hop_cap <= self.config.max_hops:
            raise InvalidInput(
                f"max_hops must be between 1 and {self.config.max_hops}, got {hop_cap}"
            )

        search = _RouteSearch(self.engine, snapshot, token_out, hop_cap, fee_rate)
        if search.graph.has_token(token_in) and search.graph.has_token(token_out):
            search.explore((token_in,), (amount_in,))

        if search.best is None:
            logger.info(
                "no_route_found",
                token_in=token_in,
                token_out=token_out,
                max_hops=hop_cap,
                candidates=search.candidates,
            )
            raise NoRouteExists(
                f"No route from {token_in} to {token_out} within {hop_cap} hops"
            )

        best = search.best
        logger.debug(
            "best_route_found",
            path=list(best.path),
            amount_in=amount_in,
            amount_out=best.amount_out,
            candidates=search.candidates,
            quotes=search.quotes,
        )
        return best, best.amount_out


class _RouteSearch:
    """Depth-first enumeration state for one find_best_route call."""

    def __init__(
        self,
        engine: SwapEngine,
        snapshot: PoolGraphSnapshot,
        token_out: AssetId,
        max_hops: int,
        fee_rate: Rate | None,
    ) -> None:
        self.engine = engine
        self.snapshot = snapshot
        self.graph = snapshot.graph
        self.token_out = token_out
        self.max_hops = max_hops
        self.fee_rate = fee_rate
        self.best: Route | None = None
        self.candidates = 0
        self.quotes = 0

    def explore(self, path: tuple[AssetId, ...], amounts: tuple[int, ...]) -> None:
        current = path[-1]
        for neighbor in self.graph.neighbors(current):
            if neighbor in path:
                continue
            pool = self.snapshot.get(current, neighbor)
            if pool is None:
                continue

            self.quotes += 1
            try:
                amount_out, _ = self.engine.quote(pool, current, amounts[-1], self.fee_rate)
            except (SwapError, MathError) as e:
                logger.debug(
                    "hop_skipped",
                    asset_in=current,
                    asset_out=neighbor,
                    amount_in=amounts[-1],
                    reason=type(e).__name__,
                )
                continue
            if amount_out == 0:
                continue

            next_path = path + (neighbor,)
            next_amounts = amounts + (amount_out,)
            if neighbor == self.token_out:
                self._consider(Route(next_path, next_amounts))
            elif len(next_path) - 1 < self.max_hops:
                self.explore(next_path, next_amounts)

    def _consider(self, route: Route) -> None:
        self.candidates += 1
        if self.best is None or route.sort_key() < self.best.sort_key():
            self.best = route
