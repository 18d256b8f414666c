"""Two-asset StableSwap curve.

The invariant D satisfies

    Ann * (x + y) + D = Ann * D + D^3 / (4 * x * y),    Ann = A * n^n = 4A

which blends constant-sum behavior near balance with constant-product
behavior at the extremes. Multiplying out by 4xy gives a quadratic in y for
fixed x and D:

    4*Ann*x*y^2 + 4*x*(Ann*x + D - Ann*D)*y - D^3 = 0

whose positive root is the rebalanced reserve.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from amm_engine.constants import N_MAX
from amm_engine.curves.base import Curve
from amm_engine.errors import SolverDidNotConverge
from amm_engine.safe_int import S

logger = structlog.get_logger()

N_COINS = 2


@dataclass(frozen=True)
class StableSwapCurve(Curve):
    """StableSwap curve with amplification coefficient A.

    Attributes:
        amplification: The A parameter (higher = flatter price near balance)
    """

    amplification: int
    name: str = "stable_swap"

    def __post_init__(self) -> None:
        if self.amplification < 1:
            raise ValueError(f"amplification must be >= 1, got {self.amplification}")

    @property
    def ann(self) -> int:
        return self.amplification * N_COINS**N_COINS

    def invariant(self, x: int, y: int) -> int:
        return compute_d(x, y, self.ann)

    def residual(self, x: int, y: int, target: int) -> int:
        ann = self.ann
        d = target
        return 4 * ann * x * y * y + 4 * x * (ann * x + d - ann * d) * y - d**3

    def derivative(self, x: int, y: int, target: int) -> int:
        ann = self.ann
        d = target
        return 8 * ann * x * y + 4 * x * (ann * x + d - ann * d)


def compute_d(x: int, y: int, ann: int, max_iterations: int = N_MAX) -> int:
    """Compute the StableSwap invariant D for two reserves.

    Newton iteration starting from D = x + y:

        D_P = D^3 / (4xy)
        D' = (Ann*S + 2*D_P) * D / ((Ann - 1) * D + 3 * D_P)

    Raises:
        SolverDidNotConverge: If successive estimates still differ by more
            than 1 after max_iterations
    """
    if x == 0 or y == 0:
        # Degenerate pool; the invariant is undefined on the axes
        return 0

    s = x + y

    sum_balances = S(s)
    d = sum_balances
    diff = s
    for _ in range(max_iterations):
        d_p = d
        d_p = (d_p * d) // (S(x) * N_COINS)
        d_p = (d_p * d) // (S(y) * N_COINS)
        d_prev = d
        numerator = (sum_balances * ann + d_p * N_COINS) * d
        denominator = S(ann - 1) * d + d_p * (N_COINS + 1)
        d = numerator // denominator
        diff = abs(d.value - d_prev.value)
        if diff <= 1:
            return d.value

    logger.warning("stable_swap_d_not_converged", x=x, y=y, ann=ann, diff=diff)
    raise SolverDidNotConverge(diff, 1)
