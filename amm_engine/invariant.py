"""Newton-Raphson solver for the rebalanced reserve of a pool.

Given a curve F, a fixed reserve x' and the invariant value to preserve,
finds y' such that F(x', y') = target. The solver never raises on
non-convergence: it returns the best estimate together with the size of the
last step, and callers decide whether that step is acceptable.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from amm_engine.constants import CONVERGENCE_EPSILON, N_MAX
from amm_engine.curves.base import Curve

logger = structlog.get_logger()


@dataclass(frozen=True)
class YEvaluation:
    """Result of one invariant solve.

    Attributes:
        y: The solved reserve
        y_diff: Magnitude of the final Newton step (convergence bound)
        iterations: Number of Newton steps taken
        converged: Whether y_diff <= epsilon was reached within the cap
    """

    y: int
    y_diff: int
    iterations: int = 0
    converged: bool = True


class InvariantSolver:
    """Bounded Newton-Raphson iteration on integer reserves.

    Each step is ``y_next = max(0, y - g // d)`` with g the curve residual and
    d its derivative. Floor division rounds the step toward the larger y, so
    iterates approaching the root from above stay at or above it and the
    pool keeps at least its invariant. Curves with a closed-form solution
    skip the iteration.
    """

    def __init__(
        self,
        max_iterations: int = N_MAX,
        epsilon: int = CONVERGENCE_EPSILON,
    ) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        if epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {epsilon}")
        self.max_iterations = max_iterations
        self.epsilon = epsilon

    def solve(self, curve: Curve, x: int, y_start: int, target: int) -> YEvaluation:
        """Solve F(x, y) = target for y, starting from y_start.

        Args:
            curve: Curve oriented so that x is the fixed reserve
            x: The fixed reserve after the trade
            y_start: Initial estimate, normally the current reserve
            target: Invariant value to preserve

        Returns:
            YEvaluation with the best y found and the last step size
        """
        closed_form = curve.solve_y(x, target)
        if closed_form is not None:
            y = curve.round_up(x, closed_form, target)
            return YEvaluation(y=y, y_diff=0, iterations=0, converged=True)

        y_prev = y_start
        y_next = y_start
        diff = y_start
        iterations = 0

        for _ in range(self.max_iterations):
            iterations += 1
            g = curve.residual(x, y_prev, target)
            if g == 0:
                y_next = y_prev
                diff = 0
                break

            d = curve.derivative(x, y_prev, target)
            if d <= 0:
                logger.warning(
                    "solver_non_positive_derivative",
                    curve=curve.name,
                    x=x,
                    y=y_prev,
                    derivative=d,
                )
                y_next = y_prev
                break

            y_next = max(0, y_prev - g // d)
            diff = abs(y_next - y_prev)
            if diff <= self.epsilon:
                break
            y_prev = y_next

        converged = diff <= self.epsilon
        if not converged:
            logger.debug(
                "solver_not_converged",
                curve=curve.name,
                x=x,
                y=y_next,
                y_diff=diff,
                iterations=iterations,
            )

        y = curve.round_up(x, y_next, target)
        return YEvaluation(y=y, y_diff=diff, iterations=iterations, converged=converged)

