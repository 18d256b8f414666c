"""Checked integer wrapper for reserve and amount arithmetic.

SafeInt makes the failure modes of unsigned 128-bit arithmetic explicit:
- Division by zero raises DivisionByZero
- Subtraction underflow raises Underflow
- Values outside u128 raise U128Overflow on conversion

Usage pattern:
    from amm_engine.safe_int import S

    def new_reserve(reserve: int, amount_in: int) -> int:
        return (S(reserve) + amount_in).to_u128()
"""

from __future__ import annotations

from amm_engine.constants import U128_MAX
from amm_engine.errors import ArithmeticOverflow, ArithmeticUnderflow, MathError


class SafeIntError(MathError, ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError, ArithmeticUnderflow):
    """Subtraction would produce a negative result."""

    pass


class U128Overflow(SafeIntError, ArithmeticOverflow):
    """Value is negative or exceeds the u128 maximum."""

    pass


class SafeInt:
    """Integer with checked arithmetic operations.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up).

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-((-self._value) // other_val))

    def saturating_sub(self, other: SafeInt | int) -> SafeInt:
        """Subtract, clamping the result to zero instead of raising."""
        return SafeInt(max(0, self._value - _extract_value(other)))

    def to_u128(self) -> int:
        """Convert to int, validating u128 bounds.

        Raises:
            U128Overflow: If value is negative or exceeds 2^128-1
        """
        if self._value < 0:
            raise U128Overflow(f"Negative value cannot be u128: {self._value}")
        if self._value > U128_MAX:
            raise U128Overflow(f"Value exceeds u128 max: {self._value}")
        return self._value

    def is_u128(self) -> bool:
        """Check if value fits in u128 without raising."""
        return 0 <= self._value <= U128_MAX


def _extract_value(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
