"""Speed multiplier solver for additively blended motions.

Sibling motions under one direct blend tree play concurrently. To keep a
short sibling from finishing long before a long one, each sibling i gets a
multiplier m[i] satisfying the fixed point

    m[i] = 1 + sum(lengths[j] / m[j] for j != i) / lengths[i]

so that every sibling completes within a span derived from all siblings'
scaled lengths. The system is solved by Gauss-Seidel relaxation: within a
pass, entries before i already use this pass's values.
"""

from __future__ import annotations

import logging

from blendfold.core.config.models import SpeedConfig

logger = logging.getLogger(__name__)


class SpeedConvergenceError(RuntimeError):
    """Raised when the solver does not converge within the iteration limit."""


def relax(multipliers: list[float], lengths: list[float]) -> list[float]:
    """Run one Gauss-Seidel pass.

    Terms whose length or multiplier is zero contribute nothing.

    Args:
        multipliers: Multipliers from the previous pass.
        lengths: Unscaled sibling lengths.

    Returns:
        Multipliers for this pass.
    """
    n = len(multipliers)
    updated = [0.0] * n
    for i in range(n):
        value = 1.0
        if lengths[i] != 0:
            for j in range(i):
                if updated[j] != 0:
                    value += lengths[j] / updated[j] / lengths[i]
            for j in range(i + 1, n):
                if multipliers[j] != 0:
                    value += lengths[j] / multipliers[j] / lengths[i]
        updated[i] = value
    return updated


def residual(previous: list[float], current: list[float]) -> float:
    """Sum of absolute differences between two multiplier vectors."""
    return sum(abs(a - b) for a, b in zip(previous, current, strict=True))


class SpeedSolver:
    """Iterative solver for sibling speed multipliers.

    Example:
        >>> SpeedSolver().solve([2.0])
        [1.0]
    """

    def __init__(self, config: SpeedConfig | None = None) -> None:
        self.config = config or SpeedConfig()

    def solve(self, lengths: list[float]) -> list[float]:
        """Compute one multiplier per length.

        Args:
            lengths: Unscaled effective lengths of sibling motions.

        Returns:
            Converged multipliers, same order and size as ``lengths``.

        Raises:
            SpeedConvergenceError: If the change between passes stays above
                the tolerance for ``max_iterations`` passes.
        """
        if not lengths:
            return []

        lengths = [float(length) for length in lengths]
        previous = [1.0] * len(lengths)
        current = relax(previous, lengths)
        iterations = 1
        while residual(previous, current) > self.config.tolerance:
            if iterations >= self.config.max_iterations:
                raise SpeedConvergenceError(
                    f"Speed solver did not converge after {iterations} iterations "
                    f"for lengths {lengths}"
                )
            previous = current
            current = relax(previous, lengths)
            iterations += 1

        logger.debug(f"Speed solver converged in {iterations} iterations for {len(lengths)} motions")
        return current


def solve_speeds(lengths: list[float]) -> list[float]:
    """Solve speed multipliers with default solver settings."""
    return SpeedSolver().solve(lengths)
