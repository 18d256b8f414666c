"""Unsigned 128-bit fixed-point rates and a deterministic power function.

A Rate stores an integer ``raw`` scaled by DIV (10^18), so 0.3% is stored as
3_000_000_000_000_000. The raw value must fit in u128.

The ln/exp/pow primitives are a port of Balancer's LogExpMath.sol:
https://github.com/balancer-labs/balancer-v2-monorepo/blob/6c9e24e22d0c46cca6dd15861d3d33da61a60b98/pkg/solidity-utils/contracts/math/LogExpMath.sol

They work entirely on fixed-point integers (digit extraction plus truncated
Taylor/arctanh series at 18, 20 and 36 decimals), so results are identical
on every platform. Native float ``**`` is never used.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import ClassVar

from amm_engine.constants import DIV, U128_MAX
from amm_engine.errors import ArithmeticOverflow, ArithmeticUnderflow, InvalidBase

__all__ = [
    "Rate",
    "to_float",
    "from_float",
    "power",
    "pow_fixed",
    "exp_fixed",
    "ONE_18",
    "ONE_20",
    "ONE_36",
]

ONE_18 = DIV
ONE_20 = 10**20
ONE_36 = 10**36

# e^130 is the largest value the exp series can produce; e^-41 is ~0
MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# ln is evaluated at 36 decimals inside (0.9, 1.1)
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

# Bounds |exponent| so that ln(x) * exponent cannot exceed 2^254
MILD_EXPONENT_BOUND = (1 << 254) // ONE_20

# Digit extraction tables: X holds powers of two, A holds e^X.
# Indices 0-1 are 18-decimal, 2-11 are 20-decimal.
_X = (
    128 * ONE_18,
    64 * ONE_18,
    3_200_000_000_000_000_000_000,
    1_600_000_000_000_000_000_000,
    800_000_000_000_000_000_000,
    400_000_000_000_000_000_000,
    200_000_000_000_000_000_000,
    100_000_000_000_000_000_000,
    50_000_000_000_000_000_000,
    25_000_000_000_000_000_000,
    12_500_000_000_000_000_000,
    6_250_000_000_000_000_000,
)
_A = (
    38877084059945950922200000000000000000000000000000000000,
    6235149080811616882910000000,
    7_896_296_018_268_069_516_100_000_000_000_000,
    888_611_052_050_787_263_676_000_000,
    298_095_798_704_172_827_474_000,
    5_459_815_003_314_423_907_810,
    738_905_609_893_065_022_723,
    271_828_182_845_904_523_536,
    164_872_127_070_012_814_685,
    128_402_541_668_774_148_407,
    113_314_845_306_682_631_683,
    106_449_445_891_785_942_956,
)


# =============================================================================
# Rate
# =============================================================================


class Rate:
    """Unsigned fixed-point fraction backed by a u128 raw integer.

    Used for fee rates, exchange rates, curve weights and exponents.
    Immutable and hashable so it can live inside frozen pool records.
    """

    ONE: ClassVar[int] = DIV

    __slots__ = ("_raw",)
    _raw: int

    def __init__(self, raw: int) -> None:
        """Create a Rate from its raw scaled value.

        Raises:
            ArithmeticUnderflow: If raw is negative
            ArithmeticOverflow: If raw exceeds the u128 range
        """
        if raw < 0:
            raise ArithmeticUnderflow(f"Rate cannot be negative: {raw}")
        if raw > U128_MAX:
            raise ArithmeticOverflow(f"Rate exceeds u128 range: {raw}")
        self._raw = raw

    @property
    def raw(self) -> int:
        return self._raw

    @classmethod
    def zero(cls) -> Rate:
        return cls(0)

    @classmethod
    def one(cls) -> Rate:
        return cls(DIV)

    def is_zero(self) -> bool:
        return self._raw == 0

    def complement(self) -> Rate:
        """Return 1 - self, clamped to 0."""
        return Rate(max(0, DIV - self._raw))

    def checked_mul_int(self, n: int) -> int:
        """Multiply an integer by this rate, rounding down.

        Raises:
            ArithmeticOverflow: If the product does not fit in u128
        """
        result = (self._raw * n) // DIV
        if result > U128_MAX:
            raise ArithmeticOverflow(f"{self!r} * {n} exceeds u128 range")
        return result

    def to_decimal(self) -> Decimal:
        return Decimal(self._raw) / Decimal(DIV)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rate):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(("Rate", self._raw))

    def __lt__(self, other: Rate) -> bool:
        return self._raw < other._raw

    def __le__(self, other: Rate) -> bool:
        return self._raw <= other._raw

    def __gt__(self, other: Rate) -> bool:
        return self._raw > other._raw

    def __ge__(self, other: Rate) -> bool:
        return self._raw >= other._raw

    def __repr__(self) -> str:
        return f"Rate({self._raw})"

    def __str__(self) -> str:
        return str(self.to_decimal())


# =============================================================================
# Float conversion
# =============================================================================


def to_float(rate: Rate) -> float:
    """Convert a Rate to its nearest float (``raw / DIV``)."""
    return rate.raw / DIV


def _scale_float(value: float) -> int:
    """Return round(value * DIV) computed exactly, signed."""
    if not math.isfinite(value):
        raise ArithmeticOverflow(f"Cannot represent non-finite value {value}")
    with localcontext() as ctx:
        ctx.prec = 80
        scaled = (Decimal(value) * DIV).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(scaled)


def from_float(value: float) -> Rate:
    """Convert a float to the nearest Rate.

    The product ``value * DIV`` is computed exactly (no intermediate float
    rounding) and checked against the u128 range instead of wrapping.

    Raises:
        ArithmeticOverflow: If the scaled value exceeds u128 or is not finite
        ArithmeticUnderflow: If value is negative
    """
    raw = _scale_float(value)
    if raw < 0:
        raise ArithmeticUnderflow(f"Rate cannot represent negative value {value}")
    if raw > U128_MAX:
        raise ArithmeticOverflow(f"{value} * DIV exceeds u128 range")
    return Rate(raw)


# =============================================================================
# ln / exp / pow on 18-decimal fixed-point integers
# =============================================================================


def _div_trunc(a: int, b: int) -> int:
    """Integer division truncating toward zero, as Solidity and Rust divide.

    Python's // rounds toward negative infinity, which differs only when
    the operands have different signs.
    """
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def _ln(a: int) -> int:
    """ln(a) for a > 0, 18-decimal in and out."""
    if a < ONE_18:
        # ln(a) = -ln(1/a)
        return -_ln((ONE_18 * ONE_18) // a)

    # Every operation below is on positive values, where // truncates
    sum_val = 0

    # Extract large powers of e (18-decimal precision)
    for i in range(2):
        if a >= _A[i] * ONE_18:
            a //= _A[i]
            sum_val += _X[i]

    # Scale up to 20-decimal precision
    sum_val *= 100
    a *= 100

    # Extract medium powers of e (20-decimal precision)
    for i in range(2, 12):
        if a >= _A[i]:
            a = (a * ONE_20) // _A[i]
            sum_val += _X[i]

    # ln(a) = 2 * arctanh((a - 1) / (a + 1)) = 2 * (z + z^3/3 + z^5/5 + ...),
    # six terms up to z^11/11
    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    z_squared = (z * z) // ONE_20
    num = z
    series_sum = num
    for i in range(3, 12, 2):
        num = (num * z_squared) // ONE_20
        series_sum += num // i

    return (sum_val + series_sum * 2) // 100


def _ln_36(x: int) -> int:
    """ln(x) for x close to 1, 18-decimal in, 36-decimal out."""
    x *= ONE_18  # Scale to 36 decimals

    # z is negative when the input is below 1, so divisions truncate
    z = _div_trunc((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _div_trunc(z * z, ONE_36)
    num = z
    series_sum = num

    # Eight terms up to z^15/15
    for i in range(3, 16, 2):
        num = _div_trunc(num * z_squared, ONE_36)
        series_sum += _div_trunc(num, i)
    return series_sum * 2


def exp_fixed(x: int) -> int:
    """e^x for an 18-decimal exponent (may be negative).

    Raises:
        ArithmeticOverflow: If x is outside [-41, 130]
    """
    if not (MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT):
        raise ArithmeticOverflow(f"Exponent {x} outside valid range")

    if x < 0:
        # e^-x = 1 / e^x
        return (ONE_18 * ONE_18) // exp_fixed(-x)

    # Extract large powers of e (18-decimal)
    if x >= _X[0]:
        x -= _X[0]
        first_an = _A[0]
    elif x >= _X[1]:
        x -= _X[1]
        first_an = _A[1]
    else:
        first_an = 1

    # Scale to 20-decimal precision, then extract medium powers of e
    x *= 100
    product = ONE_20
    for i in range(2, 10):
        if x >= _X[i]:
            x -= _X[i]
            product = (product * _A[i]) // ONE_20

    # Taylor series: e^x = 1 + x + x^2/2! + ... + x^12/12!
    series_sum = ONE_20 + x
    term = x
    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return (((product * series_sum) // ONE_20) * first_an) // 100


def pow_fixed(x: int, y: int) -> int:
    """x^y where x >= 0 and y are 18-decimal fixed-point integers.

    Results below e^-41 are returned as 0.

    Raises:
        InvalidBase: If x is negative
        ArithmeticOverflow: If x, y or y * ln(x) exceed the intermediate range
    """
    if x < 0:
        raise InvalidBase(f"Power base must be non-negative, got {x}")
    if y == 0:
        return ONE_18
    if x == 0:
        if y < 0:
            raise ArithmeticOverflow("Zero raised to a negative exponent")
        return 0
    if x >= (1 << 255):
        raise ArithmeticOverflow(f"Base {x} too large")
    if abs(y) >= MILD_EXPONENT_BOUND:
        raise ArithmeticOverflow(f"Exponent {y} exceeds bound")

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        ln_36_x = _ln_36(x)
        whole = _div_trunc(ln_36_x, ONE_18)
        rem = ln_36_x - whole * ONE_18
        logx_times_y = whole * y + _div_trunc(rem * y, ONE_18)
    else:
        logx_times_y = _ln(x) * y

    logx_times_y = _div_trunc(logx_times_y, ONE_18)
    if logx_times_y < MIN_NATURAL_EXPONENT:
        # e^-41 is under two raw units; anything smaller rounds to zero
        return 0
    if logx_times_y > MAX_NATURAL_EXPONENT:
        raise ArithmeticOverflow(f"Product {logx_times_y} outside valid range")

    return exp_fixed(logx_times_y)


def power(base: float, exponent: float) -> float:
    """Compute base^exponent through the fixed-point pow.

    Both operands are converted to 18-decimal fixed-point first; the result
    must fit the u128 fixed-point range.

    Raises:
        InvalidBase: If base is negative
        ArithmeticOverflow: If any operand or the result is not representable
    """
    if not math.isfinite(base):
        raise ArithmeticOverflow(f"Cannot represent non-finite base {base}")
    if base < 0:
        raise InvalidBase(f"Power base must be non-negative, got {base}")
    x = from_float(base).raw
    y = _scale_float(exponent)
    if abs(y) > U128_MAX:
        raise ArithmeticOverflow(f"Exponent {exponent} exceeds u128 range")

    raw = pow_fixed(x, y)
    if raw > U128_MAX:
        raise ArithmeticOverflow(f"{base} ** {exponent} exceeds u128 fixed-point range")
    return raw / DIV
