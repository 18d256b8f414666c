"""Weighted product curve (Balancer-style).

F(x, y) = x^w_x * y^w_y

evaluated with the fixed-point pow. y is solved in closed form rather than by
Newton iteration; the pow error leaves it a few units off the root, and
``round_up`` steps it upward until the invariant is met.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from amm_engine.constants import DIV, N_MAX
from amm_engine.curves.base import Curve
from amm_engine.math.fixed_point import Rate, pow_fixed

ONE = DIV

# round_up step is one part in 10^12 of y (at least one unit)
_ROUND_UP_DIVISOR = 10**12


@dataclass(frozen=True)
class WeightedProductCurve(Curve):
    """Two-asset weighted product curve.

    Attributes:
        base_weight: Weight of the base reserve
        quote_weight: Weight of the quote reserve
        fixed_is_base: Whether x is the base reserve (set by ``oriented``)
    """

    base_weight: Rate
    quote_weight: Rate
    fixed_is_base: bool = True
    name: str = "weighted_product"

    def __post_init__(self) -> None:
        if self.base_weight.is_zero() or self.quote_weight.is_zero():
            raise ValueError("Weights must be positive")
        if self.base_weight.raw + self.quote_weight.raw != ONE:
            raise ValueError(
                f"Weights must sum to one, got {self.base_weight} + {self.quote_weight}"
            )

    @property
    def fixed_weight(self) -> Rate:
        return self.base_weight if self.fixed_is_base else self.quote_weight

    @property
    def solved_weight(self) -> Rate:
        return self.quote_weight if self.fixed_is_base else self.base_weight

    def oriented(self, fixed_is_base: bool) -> WeightedProductCurve:
        if fixed_is_base == self.fixed_is_base:
            return self
        return replace(self, fixed_is_base=fixed_is_base)

    def invariant(self, x: int, y: int) -> int:
        """Invariant as an 18-decimal fixed-point integer.

        Raises:
            ArithmeticOverflow: If a reserve is too large for the fixed-point pow
        """
        fx = pow_fixed(x * ONE, self.fixed_weight.raw)
        fy = pow_fixed(y * ONE, self.solved_weight.raw)
        return fx * fy // ONE

    def residual(self, x: int, y: int, target: int) -> int:
        return self.invariant(x, y) - target

    def solve_y(self, x: int, target: int) -> int:
        """y = (target / x^w_x)^(1 / w_y), rounded up to a whole unit.

        The pow error scales with the reserves, so the result can sit below
        the root; ``round_up`` restores the invariant.

        Raises:
            ArithmeticOverflow: If a reserve is too large for the fixed-point pow
        """
        fx = pow_fixed(x * ONE, self.fixed_weight.raw)
        ratio = target * ONE // fx
        y_fixed = pow_fixed(ratio, ONE * ONE // self.solved_weight.raw)
        return -(-y_fixed // ONE)

    def round_up(self, x: int, y: int, target: int) -> int:
        for _ in range(N_MAX):
            if self.residual(x, y, target) >= 0:
                return y
            y += max(1, y // _ROUND_UP_DIVISOR)
        return y
