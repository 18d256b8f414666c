"""Pytest configuration and fixtures."""

import pytest

from amm_engine.config import EngineConfig
from amm_engine.pools.store import PoolStore
from amm_engine.routing.router import Router
from amm_engine.swap import SwapEngine
from tests.helpers import DOT, KSM, USDT, ZERO_FEE, make_pool, make_store


@pytest.fixture
def zero_fee_config() -> EngineConfig:
    """Engine config with no default fee."""
    return EngineConfig(default_fee_rate=ZERO_FEE)


@pytest.fixture
def engine() -> SwapEngine:
    """Swap engine with the default config (0.3% fee)."""
    return SwapEngine()


@pytest.fixture
def zero_fee_engine(zero_fee_config: EngineConfig) -> SwapEngine:
    """Swap engine that charges no fee unless a pool sets one."""
    return SwapEngine(zero_fee_config)


@pytest.fixture
def router(zero_fee_engine: SwapEngine, zero_fee_config: EngineConfig) -> Router:
    """Zero-fee router."""
    return Router(zero_fee_engine, zero_fee_config)


@pytest.fixture
def balanced_pool():
    """The 1M/1M DOT/USDT constant product pool."""
    return make_pool(DOT, USDT, 1_000_000, 1_000_000)


@pytest.fixture
def triangle_store() -> PoolStore:
    """DOT/USDT, USDT/KSM and a shallow direct DOT/KSM pool."""
    return make_store(
        make_pool(DOT, USDT, 1_000_000, 1_000_000),
        make_pool(USDT, KSM, 1_000_000, 1_000_000),
        make_pool(DOT, KSM, 10_000, 10_000),
    )
