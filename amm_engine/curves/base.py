"""Base class for pool invariant curves."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Curve(ABC):
    """Constant-function curve a pool holds invariant across trades.

    A curve is always evaluated as F(x, y) with x the reserve held fixed and
    y the reserve being solved for. Curves that are not symmetric in their
    two reserves return an oriented copy from ``oriented()``.

    A curve is solved either in closed form (``solve_y``) or by Newton
    iteration on ``residual`` and ``derivative``.

    Subclasses must be immutable and hashable: they are stored inside frozen
    Pool records.
    """

    name: str = "curve"

    @abstractmethod
    def invariant(self, x: int, y: int) -> int:
        """Value of F at reserves (x, y)."""
        ...

    @abstractmethod
    def residual(self, x: int, y: int, target: int) -> int:
        """Signed distance of (x, y) from the level set F = target.

        Positive when (x, y) lies above the level set, zero on it. Increasing
        in y near the root.
        """
        ...

    def derivative(self, x: int, y: int, target: int) -> int:
        """d residual / dy at (x, y). Required unless ``solve_y`` is provided."""
        raise NotImplementedError(f"{self.name} curve has no Newton derivative")

    def solve_y(self, x: int, target: int) -> int | None:
        """Closed-form y with F(x, y) = target, or None to iterate instead."""
        return None

    def oriented(self, fixed_is_base: bool) -> Curve:
        """Return this curve with x bound to the base (True) or quote reserve."""
        return self

    def round_up(self, x: int, y: int, target: int) -> int:
        """Nudge a solved y so that residual(x, y, target) >= 0.

        Curves whose residual is evaluated exactly converge from above and
        need no adjustment.
        """
        return y
