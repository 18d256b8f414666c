"""Tests for EngineConfig."""

import pytest

from amm_engine.config import DEFAULT_CONFIG, EngineConfig
from amm_engine.constants import DEFAULT_FEE_RAW, MAX_HOPS, MAX_HOPS_LIMIT, N_MAX
from amm_engine.math.fixed_point import Rate


class TestEngineConfig:
    """Defaults and validation."""

    def test_defaults(self):
        assert DEFAULT_CONFIG.max_iterations == N_MAX
        assert DEFAULT_CONFIG.max_hops == MAX_HOPS
        assert DEFAULT_CONFIG.max_y_diff == 1
        assert DEFAULT_CONFIG.default_fee_rate == Rate(DEFAULT_FEE_RAW)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_iterations": 0},
            {"max_hops": 0},
            {"max_hops": MAX_HOPS_LIMIT + 1},
            {"max_route_length": 0},
            {"convergence_epsilon": -1},
            {"max_y_diff": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)


class TestFromEnv:
    """Environment overrides."""

    def test_empty_environment(self):
        assert EngineConfig.from_env({}) == EngineConfig()

    def test_overrides(self):
        config = EngineConfig.from_env(
            {
                "AMM_MAX_ITERATIONS": "64",
                "AMM_MAX_HOPS": "4",
                "AMM_MAX_Y_DIFF": "2",
                "AMM_FEE_RATE": "0.01",
            }
        )
        assert config.max_iterations == 64
        assert config.max_hops == 4
        assert config.max_y_diff == 2
        assert config.default_fee_rate == Rate(10**16)

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("AMM_MAX_HOPS", "2")
        assert EngineConfig.from_env().max_hops == 2

    def test_invalid_override(self):
        with pytest.raises(ValueError):
            EngineConfig.from_env({"AMM_MAX_HOPS": "0"})
        with pytest.raises(ValueError):
            EngineConfig.from_env({"AMM_MAX_HOPS": "10"})
