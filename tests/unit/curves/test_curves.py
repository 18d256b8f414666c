"""Tests for the pool invariant curves."""

import math

import pytest

from amm_engine.constants import DIV
from amm_engine.curves import (
    CONSTANT_PRODUCT,
    ConstantProductCurve,
    StableSwapCurve,
    WeightedProductCurve,
    compute_d,
)
from amm_engine.math.fixed_point import Rate

HALF = Rate(DIV // 2)


class TestConstantProductCurve:
    """Tests for x * y = k."""

    def test_invariant(self):
        assert CONSTANT_PRODUCT.invariant(1_000, 2_000) == 2_000_000

    def test_residual_sign(self):
        """Residual is zero on the curve and positive above it."""
        assert CONSTANT_PRODUCT.residual(1_000, 2_000, 2_000_000) == 0
        assert CONSTANT_PRODUCT.residual(1_000, 2_001, 2_000_000) > 0
        assert CONSTANT_PRODUCT.residual(1_000, 1_999, 2_000_000) < 0

    def test_derivative_is_fixed_reserve(self):
        assert CONSTANT_PRODUCT.derivative(1_234, 5_678, 0) == 1_234

    def test_symmetric_orientation(self):
        assert CONSTANT_PRODUCT.oriented(True) is CONSTANT_PRODUCT
        assert CONSTANT_PRODUCT.oriented(False) is CONSTANT_PRODUCT

    def test_value_equality(self):
        assert ConstantProductCurve() == CONSTANT_PRODUCT
        assert hash(ConstantProductCurve()) == hash(CONSTANT_PRODUCT)


class TestStableSwapCurve:
    """Tests for the two-asset StableSwap curve."""

    def test_balanced_d_is_sum(self):
        """For x == y the invariant is exactly x + y."""
        assert compute_d(1_000, 1_000, 400) == 2_000
        assert StableSwapCurve(100).invariant(10**12, 10**12) == 2 * 10**12

    @pytest.mark.parametrize("amplification", [1, 10, 100, 1000])
    def test_d_between_product_and_sum(self, amplification):
        """D lies between the constant-product and constant-sum invariants."""
        x, y = 1_000_000, 250_000
        d = StableSwapCurve(amplification).invariant(x, y)
        assert 2 * math.isqrt(x * y) <= d <= x + y

    def test_higher_amplification_is_closer_to_sum(self):
        x, y = 1_000_000, 250_000
        low = StableSwapCurve(1).invariant(x, y)
        high = StableSwapCurve(1000).invariant(x, y)
        assert low < high <= x + y

    def test_zero_reserve_invariant_is_zero(self):
        assert compute_d(0, 1_000, 400) == 0

    def test_residual_zero_at_balance(self):
        curve = StableSwapCurve(50)
        assert curve.residual(1_000, 1_000, 2_000) == 0

    def test_residual_increasing_in_y(self):
        curve = StableSwapCurve(50)
        d = curve.invariant(1_000_000, 1_000_000)
        assert curve.residual(1_100_000, 800_000, d) < curve.residual(1_100_000, 950_000, d)
        assert curve.derivative(1_100_000, 950_000, d) > 0

    def test_invalid_amplification(self):
        with pytest.raises(ValueError):
            StableSwapCurve(0)

    def test_hashable(self):
        assert hash(StableSwapCurve(100)) == hash(StableSwapCurve(100))
        assert StableSwapCurve(100) != StableSwapCurve(200)


class TestWeightedProductCurve:
    """Tests for the weighted product curve built on the fixed-point pow."""

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            WeightedProductCurve(HALF, Rate(DIV // 4))

    def test_weights_must_be_positive(self):
        with pytest.raises(ValueError):
            WeightedProductCurve(Rate.zero(), Rate.one())

    def test_equal_weights_invariant(self):
        """50/50 weights give sqrt(x * y) in 18-decimal fixed point."""
        curve = WeightedProductCurve(HALF, HALF)
        assert curve.invariant(1_000_000, 1_000_000) == pytest.approx(10**6 * DIV, rel=1e-12)

    def test_oriented_swaps_weights(self):
        curve = WeightedProductCurve(Rate(8 * 10**17), Rate(2 * 10**17))
        flipped = curve.oriented(False)
        assert flipped.fixed_weight == Rate(2 * 10**17)
        assert flipped.solved_weight == Rate(8 * 10**17)
        assert curve.oriented(True) is curve

    def test_orientation_preserves_invariant(self):
        """F(base, quote) is the same whichever side is held fixed."""
        curve = WeightedProductCurve(Rate(8 * 10**17), Rate(2 * 10**17))
        assert curve.invariant(4_000, 9_000) == curve.oriented(False).invariant(9_000, 4_000)

    def test_round_up_meets_target(self):
        curve = WeightedProductCurve(HALF, HALF)
        target = curve.invariant(1_000_000, 1_000_000)
        # 909_090 sits just below the real root 10^12 / 1.1e6
        assert curve.residual(1_100_000, 909_090, target) < 0
        y = curve.round_up(1_100_000, 909_090, target)
        assert curve.residual(1_100_000, y, target) >= 0
        assert 909_090 < y <= 909_092
