"""Pool invariant curves."""

from amm_engine.curves.base import Curve
from amm_engine.curves.constant_product import CONSTANT_PRODUCT, ConstantProductCurve
from amm_engine.curves.stable_swap import StableSwapCurve, compute_d
from amm_engine.curves.weighted import WeightedProductCurve

__all__ = [
    "Curve",
    "ConstantProductCurve",
    "CONSTANT_PRODUCT",
    "StableSwapCurve",
    "WeightedProductCurve",
    "compute_d",
]
