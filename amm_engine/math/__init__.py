"""Fixed-point math utilities."""

from amm_engine.math.fixed_point import Rate, exp_fixed, from_float, pow_fixed, power, to_float

__all__ = ["Rate", "to_float", "from_float", "power", "pow_fixed", "exp_fixed"]
