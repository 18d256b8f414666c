"""Trade execution: commits priced swaps to the pool store and the ledger.

Pricing and routing are pure. TradeExecutor is the one place that writes:
it validates the route, prices every hop against the store's current
reserves, enforces the caller's minimum output, moves balances through the
ledger and finally persists the new pools. Any failure before the last step
leaves the store and ledger exactly as they were.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import structlog

from amm_engine.config import DEFAULT_CONFIG, EngineConfig
from amm_engine.curves.base import Curve
from amm_engine.curves.constant_product import CONSTANT_PRODUCT
from amm_engine.errors import (
    DuplicatedRoute,
    EmptyRoute,
    ExceedMaxLengthRoute,
    InsufficientBalance,
    InsufficientOutput,
    InvalidInput,
    NotSupportedRoute,
    PoolAlreadyExists,
    TransferError,
)
from amm_engine.math.fixed_point import Rate
from amm_engine.pools.store import PoolStore, pair_key
from amm_engine.pools.types import AssetId, Pool
from amm_engine.routing.router import Route, Router
from amm_engine.swap import SwapEngine

logger = structlog.get_logger()

Account = str


class Ledger(Protocol):
    """Atomic balance transfer between accounts.

    A transfer either fully succeeds or raises TransferError with all
    balances unchanged.
    """

    def transfer(self, asset: AssetId, from_: Account, to: Account, amount: int) -> None: ...


class InMemoryLedger:
    """Dictionary-backed ledger for tests and local simulation."""

    def __init__(self) -> None:
        self._balances: dict[tuple[Account, AssetId], int] = {}

    def balance(self, account: Account, asset: AssetId) -> int:
        return self._balances.get((account, asset), 0)

    def deposit(self, account: Account, asset: AssetId, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Deposit amount must be non-negative, got {amount}")
        self._balances[(account, asset)] = self.balance(account, asset) + amount

    def transfer(self, asset: AssetId, from_: Account, to: Account, amount: int) -> None:
        """Move amount of asset from one account to another.

        Raises:
            InsufficientBalance: If from_ holds less than amount
        """
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")
        available = self.balance(from_, asset)
        if available < amount:
            raise InsufficientBalance(
                f"Account {from_} holds {available} of asset {asset}, needs {amount}"
            )
        self._balances[(from_, asset)] = available - amount
        self._balances[(to, asset)] = self.balance(to, asset) + amount


def pool_account(pool: Pool) -> Account:
    """Ledger account holding a pool's reserves, derived from its pair."""
    return f"pool:{pool.base_asset}-{pool.quote_asset}"


class TradeExecutor:
    """Validates, prices and commits trades.

    Args:
        store: Pool store (the only place reserves are written)
        ledger: Balance transfer primitive
        engine: Swap engine; built from config when omitted
        router: Router for best-route trades; built from engine when omitted
        config: Engine bounds, including max_route_length
    """

    def __init__(
        self,
        store: PoolStore,
        ledger: Ledger,
        engine: SwapEngine | None = None,
        router: Router | None = None,
        config: EngineConfig = DEFAULT_CONFIG,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self.config = config
        self.engine = engine or SwapEngine(config)
        self.router = router or Router(self.engine, config)

    def create_pool(
        self,
        provider: Account,
        base_asset: AssetId,
        quote_asset: AssetId,
        base_amount: int,
        quote_amount: int,
        pool_assets: AssetId,
        curve: Curve = CONSTANT_PRODUCT,
        fee_rate: Rate | None = None,
    ) -> Pool:
        """Create a pool funded by provider's balances.

        Raises:
            PoolAlreadyExists: If the pair already has a pool
            TransferError: If provider cannot fund either reserve
        """
        if self.store.get(base_asset, quote_asset) is not None:
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
        account = pool_account(pool)
        self._transfer_all(
            [
                (base_asset, provider, account, base_amount),
                (quote_asset, provider, account, quote_amount),
            ]
        )
        return self.store.create_pool(
            base_asset,
            quote_asset,
            base_amount,
            quote_amount,
            pool_assets,
            curve=curve,
            fee_rate=fee_rate,
        )

    def validate_route(self, path: Sequence[AssetId]) -> list[Pool]:
        """Check a caller-supplied route and return its pools in order.

        Raises:
            EmptyRoute: If the route has no hop
            ExceedMaxLengthRoute: If it has more than max_route_length hops
            DuplicatedRoute: If it traverses a pool twice
            NotSupportedRoute: If a hop has no pool
        """
        if len(path) < 2:
            raise EmptyRoute("Route must contain at least one hop")
        hops = len(path) - 1
        if hops > self.config.max_route_length:
            raise ExceedMaxLengthRoute(
                f"Route has {hops} hops, maximum is {self.config.max_route_length}"
            )

        seen: set[frozenset[AssetId]] = set()
        pools: list[Pool] = []
        for asset_in, asset_out in zip(path, path[1:]):
            key = pair_key(asset_in, asset_out)
            if key in seen:
                raise DuplicatedRoute(f"Route uses pool ({asset_in}, {asset_out}) twice")
            seen.add(key)
            pool = self.store.get(asset_in, asset_out)
            if pool is None:
                raise NotSupportedRoute(f"No pool for hop ({asset_in}, {asset_out})")
            pools.append(pool)
        return pools

    def trade(
        self,
        trader: Account,
        path: Sequence[AssetId],
        amount_in: int,
        min_amount_out: int = 0,
        fee_rate: Rate | None = None,
    ) -> Route:
        """Execute an exact-input trade along path.

        Args:
            trader: Account paying amount_in of path[0] and receiving path[-1]
            path: Assets traversed; consecutive pairs name pools
            amount_in: Gross input
            min_amount_out: Smallest acceptable output
            fee_rate: Fee override for every hop

        Returns:
            The executed Route

        Raises:
            InvalidInput: If amount_in is not positive or min_amount_out is negative
            RouterError: If the route is invalid or the output is below minimum
            SwapError: If a hop cannot be priced
            TransferError: If the trader cannot pay
        """
        path = tuple(path)
        if amount_in <= 0:
            raise InvalidInput(f"amount_in must be positive, got {amount_in}")
        if min_amount_out < 0:
            raise InvalidInput(f"min_amount_out must be non-negative, got {min_amount_out}")

        pools = self.validate_route(path)
        # Price against current reserves, not whatever snapshot the route came from
        amounts, new_pools = self.engine.simulate_path(amount_in, path, self.store, fee_rate)
        if amounts[-1] < min_amount_out:
            logger.info(
                "trade_rejected",
                reason="insufficient_output",
                trader=trader,
                path=list(path),
                amount_out=amounts[-1],
                min_amount_out=min_amount_out,
            )
            raise InsufficientOutput(amounts[-1], min_amount_out)

        accounts = [trader] + [pool_account(pool) for pool in pools] + [trader]
        transfers = [(path[0], accounts[0], accounts[1], amount_in)]
        for i in range(1, len(path)):
            transfers.append((path[i], accounts[i], accounts[i + 1], amounts[i]))
        self._transfer_all(transfers)

        for (asset_in, asset_out), new_pool in zip(zip(path, path[1:]), new_pools):
            self.store.put(asset_in, asset_out, new_pool)

        logger.info(
            "trade_executed",
            trader=trader,
            path=list(path),
            amount_in=amount_in,
            amount_out=amounts[-1],
        )
        return Route(path, tuple(amounts))

    def swap_best_route(
        self,
        trader: Account,
        amount_in: int,
        token_in: AssetId,
        token_out: AssetId,
        min_amount_out: int = 0,
        fee_rate: Rate | None = None,
    ) -> Route:
        """Find the best route on a fresh snapshot and trade along it."""
        route, _ = self.router.find_best_route(
            amount_in,
            token_in,
            token_out,
            self.store.snapshot(),
            fee_rate=fee_rate,
        )
        return self.trade(trader, route.path, amount_in, min_amount_out, fee_rate)

    def _transfer_all(self, transfers: list[tuple[AssetId, Account, Account, int]]) -> None:
        """Perform transfers in order, undoing completed ones if any fails."""
        done: list[tuple[AssetId, Account, Account, int]] = []
        try:
            for asset, from_, to, amount in transfers:
                self.ledger.transfer(asset, from_, to, amount)
                done.append((asset, from_, to, amount))
        except TransferError:
            for asset, from_, to, amount in reversed(done):
                self.ledger.transfer(asset, to, from_, amount)
            raise
