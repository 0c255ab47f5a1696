"""Speed synchronisation for additively blended motions."""

from blendfold.core.speed.solver import SpeedConvergenceError, SpeedSolver, solve_speeds
from blendfold.core.speed.tree import (
    TreeSpeedSynchronizer,
    clip_length,
    fix_tree_speed,
    multiply_tree_speed,
    reset_tree_speed,
    tree_length,
)

__all__ = [
    "SpeedConvergenceError",
    "SpeedSolver",
    "TreeSpeedSynchronizer",
    "clip_length",
    "fix_tree_speed",
    "multiply_tree_speed",
    "reset_tree_speed",
    "solve_speeds",
    "tree_length",
]
