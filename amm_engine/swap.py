"""Swap pricing against a single pool and along a path of pools.

SwapEngine turns an input (or desired output) amount into the opposite
amount and the pool's new reserves. It never writes: the new Pool is
returned for the caller to persist.

Fee convention: the fee is taken from the input before pricing
(``net = amount_in * (1 - fee)``), while the pool's input reserve grows by
the gross amount, so fees accrue to the pool.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple, Protocol

import structlog

from amm_engine.config import DEFAULT_CONFIG, EngineConfig
from amm_engine.constants import DIV
from amm_engine.errors import (
    AssetNotInPool,
    InsufficientLiquidity,
    InvalidFeeRate,
    InvalidInput,
    PoolDoesNotExist,
    PoolInactive,
    SolverDidNotConverge,
    ZeroAmount,
)
from amm_engine.invariant import InvariantSolver, YEvaluation
from amm_engine.math.fixed_point import Rate
from amm_engine.pools.store import PairKey, pair_key
from amm_engine.pools.types import AssetId, Pool
from amm_engine.safe_int import S

logger = structlog.get_logger()


class PoolLookup(Protocol):
    """Anything that resolves an unordered pair to a pool (store or snapshot)."""

    def get(self, a: AssetId, b: AssetId) -> Pool | None: ...


class SwapQuote(NamedTuple):
    """A priced swap: the computed amount and the pool after the swap.

    ``amount`` is the output for exact-in quotes and the required input for
    exact-out quotes.
    """

    amount: int
    pool: Pool


class PathSimulation(NamedTuple):
    """Per-hop amounts and resulting pools for a multi-hop swap."""

    amounts: list[int]
    pools: list[Pool]


class SwapEngine:
    """Prices swaps with the invariant solver.

    Args:
        config: Engine bounds (solver iterations, tolerance, default fee)
        solver: Optional solver override; built from config when omitted
    """

    def __init__(
        self,
        config: EngineConfig = DEFAULT_CONFIG,
        solver: InvariantSolver | None = None,
    ) -> None:
        self.config = config
        self.solver = solver or InvariantSolver(
            max_iterations=config.max_iterations,
            epsilon=config.convergence_epsilon,
        )

    def resolve_fee(self, pool: Pool, fee_rate: Rate | None) -> Rate:
        """Pick the fee for a pool: explicit, then the pool's own, then the default."""
        if fee_rate is not None:
            return fee_rate
        if pool.fee_rate is not None:
            return pool.fee_rate
        return self.config.default_fee_rate

    def _check_pool(self, pool: Pool, asset: AssetId, amount: int, fee: Rate) -> None:
        if amount <= 0:
            raise ZeroAmount(f"Swap amount must be positive, got {amount}")
        if not pool.has_asset(asset):
            raise AssetNotInPool(f"Asset {asset} not in pool {pool.pair}")
        if not pool.is_active:
            raise PoolInactive(
                f"Pool {pool.pair} has a zero reserve "
                f"({pool.base_amount}, {pool.quote_amount})"
            )
        if fee.raw >= DIV:
            raise InvalidFeeRate(f"Fee rate must be below 1, got {fee}")

    def _check_evaluation(self, pool: Pool, evaluation: YEvaluation) -> None:
        if evaluation.y_diff > self.config.max_y_diff:
            logger.debug(
                "swap_rejected",
                reason="solver_did_not_converge",
                pool=pool.pair,
                y_diff=evaluation.y_diff,
                iterations=evaluation.iterations,
            )
            raise SolverDidNotConverge(evaluation.y_diff, self.config.max_y_diff)
        if evaluation.y <= 0:
            logger.debug("swap_rejected", reason="insufficient_liquidity", pool=pool.pair)
            raise InsufficientLiquidity(f"Swap would drain pool {pool.pair}")

    def quote(
        self,
        pool: Pool,
        asset_in: AssetId,
        amount_in: int,
        fee_rate: Rate | None = None,
    ) -> SwapQuote:
        """Price an exact-input swap.

        Args:
            pool: Pool to trade against
            asset_in: Asset being sold into the pool
            amount_in: Gross input amount (fee included)
            fee_rate: Fee override; defaults to the pool's fee, then the config's

        Returns:
            SwapQuote with amount_out and the pool after the swap

        Raises:
            ZeroAmount: If amount_in is not positive
            AssetNotInPool: If asset_in is not one of the pool's assets
            PoolInactive: If either reserve is zero
            InvalidFeeRate: If the fee is 100% or more
            SolverDidNotConverge: If the solver's last step exceeds max_y_diff
            InsufficientLiquidity: If the output reserve would reach zero
        """
        fee = self.resolve_fee(pool, fee_rate)
        self._check_pool(pool, asset_in, amount_in, fee)

        asset_out = pool.other_asset(asset_in)
        x = pool.reserve_of(asset_in)
        y0 = pool.reserve_of(asset_out)
        amount_in_net = fee.complement().checked_mul_int(amount_in)

        curve = pool.curve.oriented(asset_in == pool.base_asset)
        target = curve.invariant(x, y0)
        evaluation = self.solver.solve(curve, x + amount_in_net, y0, target)
        self._check_evaluation(pool, evaluation)

        amount_out = S(y0).saturating_sub(evaluation.y).value
        if amount_out >= y0:
            raise InsufficientLiquidity(f"Output {amount_out} would drain reserve {y0}")

        new_pool = pool.with_reserves(
            asset_in,
            (S(x) + amount_in).to_u128(),
            (S(y0) - amount_out).to_u128(),
        )
        return SwapQuote(amount_out, new_pool)

    def quote_exact_out(
        self,
        pool: Pool,
        asset_out: AssetId,
        amount_out: int,
        fee_rate: Rate | None = None,
    ) -> SwapQuote:
        """Price an exact-output swap.

        The required gross input is rounded up so that selling it through
        ``quote`` yields at least amount_out.

        Returns:
            SwapQuote with amount_in and the pool after the swap

        Raises:
            Same as ``quote``; InsufficientLiquidity also when amount_out is
            not strictly below the output reserve
        """
        fee = self.resolve_fee(pool, fee_rate)
        self._check_pool(pool, asset_out, amount_out, fee)

        asset_in = pool.other_asset(asset_out)
        y0 = pool.reserve_of(asset_out)
        x0 = pool.reserve_of(asset_in)
        if amount_out >= y0:
            logger.debug(
                "swap_rejected",
                reason="insufficient_liquidity",
                pool=pool.pair,
                amount_out=amount_out,
                reserve=y0,
            )
            raise InsufficientLiquidity(f"Output {amount_out} would drain reserve {y0}")

        # The output side is held fixed and the input reserve is solved for
        curve = pool.curve.oriented(asset_out == pool.base_asset)
        target = curve.invariant(y0, x0)
        evaluation = self.solver.solve(curve, y0 - amount_out, x0, target)
        self._check_evaluation(pool, evaluation)

        amount_in_net = S(evaluation.y).saturating_sub(x0)
        amount_in = (amount_in_net * DIV).ceiling_div(fee.complement().raw).value

        new_pool = pool.with_reserves(
            asset_in,
            (S(x0) + amount_in).to_u128(),
            (S(y0) - amount_out).to_u128(),
        )
        return SwapQuote(amount_in, new_pool)

    def simulate_path(
        self,
        amount_in: int,
        path: Sequence[AssetId],
        pools: PoolLookup,
        fee_rate: Rate | None = None,
    ) -> PathSimulation:
        """Chain exact-input quotes along path.

        Later hops see the reserves left by earlier hops through the same pool.

        Returns:
            PathSimulation with len(path) amounts (the first is amount_in) and
            the updated pool for each hop

        Raises:
            InvalidInput: If path has fewer than two assets
            PoolDoesNotExist: If a consecutive pair has no pool
            SwapError: If any hop fails to price
        """
        _require_path(path)
        overlay: dict[PairKey, Pool] = {}
        amounts = [amount_in]
        new_pools: list[Pool] = []

        for asset_in, asset_out in zip(path, path[1:]):
            pool = _lookup(pools, overlay, asset_in, asset_out)
            amount_out, new_pool = self.quote(pool, asset_in, amounts[-1], fee_rate)
            overlay[pair_key(asset_in, asset_out)] = new_pool
            amounts.append(amount_out)
            new_pools.append(new_pool)

        return PathSimulation(amounts, new_pools)

    def amounts_out(
        self,
        amount_in: int,
        path: Sequence[AssetId],
        pools: PoolLookup,
        fee_rate: Rate | None = None,
    ) -> list[int]:
        """Amounts received at each step of path for an exact input."""
        return self.simulate_path(amount_in, path, pools, fee_rate).amounts

    def amounts_in(
        self,
        amount_out: int,
        path: Sequence[AssetId],
        pools: PoolLookup,
        fee_rate: Rate | None = None,
    ) -> list[int]:
        """Inputs required at each step of path to receive exactly amount_out.

        Returns:
            len(path) amounts; the first is the required input and the last is
            amount_out
        """
        _require_path(path)
        overlay: dict[PairKey, Pool] = {}
        amounts = [amount_out]

        for asset_in, asset_out in reversed(list(zip(path, path[1:]))):
            pool = _lookup(pools, overlay, asset_in, asset_out)
            required_in, new_pool = self.quote_exact_out(pool, asset_out, amounts[0], fee_rate)
            overlay[pair_key(asset_in, asset_out)] = new_pool
            amounts.insert(0, required_in)

        return amounts


def _require_path(path: Sequence[AssetId]) -> None:
    if len(path) < 2:
        raise InvalidInput(f"Path needs at least two assets, got {list(path)}")


def _lookup(
    pools: PoolLookup,
    overlay: dict[PairKey, Pool],
    a: AssetId,
    b: AssetId,
) -> Pool:
    pool = overlay.get(pair_key(a, b)) or pools.get(a, b)
    if pool is None:
        raise PoolDoesNotExist(f"No pool for pair ({a}, {b})")
    return pool
