"""Engine configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from amm_engine.constants import (
    CONVERGENCE_EPSILON,
    DEFAULT_FEE_RAW,
    MAX_HOPS,
    MAX_HOPS_LIMIT,
    MAX_ROUTE_LENGTH,
    N_MAX,
)
from amm_engine.math.fixed_point import Rate, from_float


@dataclass(frozen=True)
class EngineConfig:
    """Tunable bounds for the solver, swap engine and router.

    Attributes:
        max_iterations: Newton iteration cap for the invariant solver
        convergence_epsilon: Solver stops once successive estimates differ by at most this
        max_y_diff: Largest final solver step a swap accepts before raising
            SolverDidNotConverge
        max_hops: Hop cap for best-route search (at most MAX_HOPS_LIMIT)
        max_route_length: Hop cap for caller-supplied routes
        default_fee_rate: Fee applied when neither the caller nor the pool sets one
    """

    max_iterations: int = N_MAX
    convergence_epsilon: int = CONVERGENCE_EPSILON
    max_y_diff: int = 1
    max_hops: int = MAX_HOPS
    max_route_length: int = MAX_ROUTE_LENGTH
    default_fee_rate: Rate = field(default_factory=lambda: Rate(DEFAULT_FEE_RAW))

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if not 1 <= self.max_hops <= MAX_HOPS_LIMIT:
            raise ValueError(
                f"max_hops must be between 1 and {MAX_HOPS_LIMIT}, got {self.max_hops}"
            )
        if self.max_route_length < 1:
            raise ValueError(f"max_route_length must be >= 1, got {self.max_route_length}")
        if self.convergence_epsilon < 0 or self.max_y_diff < 0:
            raise ValueError("convergence_epsilon and max_y_diff must be non-negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from AMM_* environment variables.

        Recognized variables:
        - AMM_MAX_ITERATIONS: solver iteration cap (default: 255)
        - AMM_MAX_HOPS: best-route hop cap (default: 3)
        - AMM_MAX_Y_DIFF: accepted solver tolerance (default: 1)
        - AMM_FEE_RATE: default fee as a fraction, e.g. "0.003"
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        fee = env.get("AMM_FEE_RATE")
        return cls(
            max_iterations=int(env.get("AMM_MAX_ITERATIONS", defaults.max_iterations)),
            max_hops=int(env.get("AMM_MAX_HOPS", defaults.max_hops)),
            max_y_diff=int(env.get("AMM_MAX_Y_DIFF", defaults.max_y_diff)),
            default_fee_rate=from_float(float(fee)) if fee else defaults.default_fee_rate,
        )


# Default configuration instance
DEFAULT_CONFIG = EngineConfig()
