"""Constant product curve (x * y = k)."""

from __future__ import annotations

from dataclasses import dataclass

from amm_engine.curves.base import Curve


@dataclass(frozen=True)
class ConstantProductCurve(Curve):
    """Uniswap-style x * y = k.

    The residual is linear in y, so one Newton step from any start lands on
    ceil(k / x) and the next step confirms it.
    """

    name: str = "constant_product"

    def invariant(self, x: int, y: int) -> int:
        return x * y

    def residual(self, x: int, y: int, target: int) -> int:
        return x * y - target

    def derivative(self, x: int, y: int, target: int) -> int:
        return x


CONSTANT_PRODUCT = ConstantProductCurve()
