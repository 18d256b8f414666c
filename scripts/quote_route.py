#!/usr/bin/env python3
"""Quote the best route for a trade across a set of pools.

Usage:
    python scripts/quote_route.py \\
        --pool 1:2:1000000:1000000 \\
        --pool 2:3:500000:2000000 \\
        --amount 1000 --token-in 1 --token-out 3

Each --pool is BASE:QUOTE:BASE_AMOUNT:QUOTE_AMOUNT[:AMPLIFICATION]. Pools with
an amplification use the StableSwap curve; the rest are constant product.
"""

import argparse
import sys
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from amm_engine.config import EngineConfig  # noqa: E402
from amm_engine.curves import CONSTANT_PRODUCT, StableSwapCurve  # noqa: E402
from amm_engine.errors import AmmError  # noqa: E402
from amm_engine.math.fixed_point import from_float  # noqa: E402
from amm_engine.pools.store import PoolStore  # noqa: E402
from amm_engine.routing.router import Router  # noqa: E402

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ]
)

logger = structlog.get_logger()

# Liquidity-share asset ids for CLI pools start here
POOL_ASSET_OFFSET = 1_000_000


def parse_pool(value: str) -> tuple[int, int, int, int, int | None]:
    """Parse BASE:QUOTE:BASE_AMOUNT:QUOTE_AMOUNT[:AMPLIFICATION]."""
    parts = value.split(":")
    if len(parts) not in (4, 5):
        raise argparse.ArgumentTypeError(
            f"Pool must be BASE:QUOTE:BASE_AMOUNT:QUOTE_AMOUNT[:AMP], got '{value}'"
        )
    try:
        values = [int(p) for p in parts]
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"Pool fields must be integers: '{value}'") from err
    amplification = values[4] if len(values) == 5 else None
    return values[0], values[1], values[2], values[3], amplification


def build_store(pools: list[tuple[int, int, int, int, int | None]]) -> PoolStore:
    store = PoolStore()
    for i, (base, quote, base_amount, quote_amount, amplification) in enumerate(pools):
        curve = StableSwapCurve(amplification) if amplification else CONSTANT_PRODUCT
        store.create_pool(
            base, quote, base_amount, quote_amount, POOL_ASSET_OFFSET + i, curve=curve
        )
    return store


def main() -> int:
    parser = argparse.ArgumentParser(description="Quote the best route for a trade")
    parser.add_argument("--pool", action="append", type=parse_pool, default=[], required=True)
    parser.add_argument("--amount", type=int, required=True, help="Input amount")
    parser.add_argument("--token-in", type=int, required=True)
    parser.add_argument("--token-out", type=int, required=True)
    parser.add_argument("--max-hops", type=int, default=None)
    parser.add_argument("--fee", type=float, default=None, help="Fee rate, e.g. 0.003")
    args = parser.parse_args()

    store = build_store(args.pool)
    config = EngineConfig.from_env()
    router = Router(config=config)
    fee_rate = from_float(args.fee) if args.fee is not None else None

    try:
        route, amount_out = router.find_best_route(
            args.amount,
            args.token_in,
            args.token_out,
            store.snapshot(),
            max_hops=args.max_hops,
            fee_rate=fee_rate,
        )
    except AmmError as e:
        logger.error("quote_failed", error=type(e).__name__, detail=str(e))
        return 1

    logger.info("route_quoted", path=list(route.path), amounts=list(route.amounts))
    print(f"Route: {' -> '.join(str(a) for a in route.path)}")
    print(f"Amount out: {amount_out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
