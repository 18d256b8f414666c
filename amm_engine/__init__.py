"""AMM pool pricing and routing engine."""

__version__ = "0.1.0"

from amm_engine.config import DEFAULT_CONFIG, EngineConfig  # noqa: E402
from amm_engine.curves import (  # noqa: E402
    CONSTANT_PRODUCT,
    ConstantProductCurve,
    Curve,
    StableSwapCurve,
    WeightedProductCurve,
)
from amm_engine.exchange import InMemoryLedger, Ledger, TradeExecutor, pool_account  # noqa: E402
from amm_engine.invariant import InvariantSolver, YEvaluation  # noqa: E402
from amm_engine.math.fixed_point import Rate, from_float, power, to_float  # noqa: E402
from amm_engine.pools import AssetId, Pool, PoolGraphSnapshot, PoolStore  # noqa: E402
from amm_engine.routing import Route, Router, TokenGraph  # noqa: E402
from amm_engine.swap import SwapEngine, SwapQuote  # noqa: E402

__all__ = [
    "__version__",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "Curve",
    "ConstantProductCurve",
    "CONSTANT_PRODUCT",
    "StableSwapCurve",
    "WeightedProductCurve",
    "InvariantSolver",
    "YEvaluation",
    "Rate",
    "to_float",
    "from_float",
    "power",
    "AssetId",
    "Pool",
    "PoolStore",
    "PoolGraphSnapshot",
    "SwapEngine",
    "SwapQuote",
    "Route",
    "Router",
    "TokenGraph",
    "TradeExecutor",
    "Ledger",
    "InMemoryLedger",
    "pool_account",
]
