"""Bottom-up speed synchronisation over blend trees.

Direct (weighted-sum) trees are synchronised with the solver: their
children's effective lengths are solved into multipliers and applied. A 1D
threshold tree is measured as its slowest child. Nested direct trees are
synchronised before their parent measures them.

All functions return new trees; input trees are never modified.
"""

from __future__ import annotations

from blendfold.core.config.models import SpeedConfig
from blendfold.core.motion.models import BlendTree, ChildMotion, Clip
from blendfold.core.speed.solver import SpeedSolver


def clip_length(clip: Clip, time_scale: float) -> float:
    """Effective playback length of a clip at ``time_scale``.

    A zero time scale freezes the clip, which contributes no length.
    """
    if time_scale == 0:
        return 0.0
    return abs(clip.length / time_scale)


class TreeSpeedSynchronizer:
    """Applies solver multipliers across a nested blend tree.

    Example:
        >>> synced, total = TreeSpeedSynchronizer().fix(master)
        >>> [c.time_scale for c in synced.children]
        [1.618..., 1.618...]
    """

    def __init__(self, config: SpeedConfig | None = None) -> None:
        self.solver = SpeedSolver(config)

    def measure(self, tree: BlendTree) -> tuple[BlendTree, float]:
        """Return ``tree`` with nested direct trees synchronised, and its length.

        The length is the largest effective length among the children.
        """
        children: list[ChildMotion] = []
        longest = 0.0
        for child in tree.children:
            child, length = self._child_length(child)
            children.append(child)
            longest = max(longest, length)
        return tree.with_children(children), longest

    def fix(self, tree: BlendTree) -> tuple[BlendTree, float]:
        """Synchronise a direct tree's children.

        Returns:
            Tuple of (synchronised tree, sum of the children's unscaled
            effective lengths). Children without a motion are left alone.
        """
        prepared: list[ChildMotion] = []
        lengths: list[float] = []
        for child in tree.children:
            child, length = self._child_length(child)
            prepared.append(child)
            if child.motion is not None:
                lengths.append(length)

        speeds = iter(self.solver.solve(lengths))
        children: list[ChildMotion] = []
        for child in prepared:
            motion = child.motion
            if isinstance(motion, Clip):
                sign = -1.0 if child.time_scale < 0 else 1.0
                child = child.model_copy(update={"time_scale": next(speeds) * sign})
            elif isinstance(motion, BlendTree):
                child = child.model_copy(update={"motion": self.multiply(motion, next(speeds))})
            children.append(child)

        return tree.with_children(children), sum(lengths)

    def multiply(self, tree: BlendTree, multiplier: float) -> BlendTree:
        """Multiply every leaf child's time scale by ``multiplier``.

        Entries holding a nested tree keep their own time scale; only the
        leaves beneath them are scaled, so nesting never compounds.
        """
        children = []
        for child in tree.children:
            if isinstance(child.motion, BlendTree):
                update: dict[str, object] = {"motion": self.multiply(child.motion, multiplier)}
            else:
                update = {"time_scale": child.time_scale * multiplier}
            children.append(child.model_copy(update=update))
        return tree.with_children(children)

    def reset(self, tree: BlendTree) -> BlendTree:
        """Set every leaf child's time scale back to 1."""
        children = []
        for child in tree.children:
            if isinstance(child.motion, BlendTree):
                update: dict[str, object] = {"motion": self.reset(child.motion)}
            else:
                update = {"time_scale": 1.0}
            children.append(child.model_copy(update=update))
        return tree.with_children(children)

    def _child_length(self, child: ChildMotion) -> tuple[ChildMotion, float]:
        motion = child.motion
        if isinstance(motion, Clip):
            return child, clip_length(motion, child.time_scale)
        if isinstance(motion, BlendTree):
            synced, length = self.fix(motion) if motion.is_direct else self.measure(motion)
            return child.model_copy(update={"motion": synced}), length
        return child, 0.0


def tree_length(tree: BlendTree) -> float:
    """Effective length of a threshold blend: its slowest child."""
    return TreeSpeedSynchronizer().measure(tree)[1]


def fix_tree_speed(tree: BlendTree, config: SpeedConfig | None = None) -> tuple[BlendTree, float]:
    """Synchronise a direct tree bottom-up. See TreeSpeedSynchronizer.fix."""
    return TreeSpeedSynchronizer(config).fix(tree)


def multiply_tree_speed(tree: BlendTree, multiplier: float) -> BlendTree:
    return TreeSpeedSynchronizer().multiply(tree, multiplier)


def reset_tree_speed(tree: BlendTree) -> BlendTree:
    return TreeSpeedSynchronizer().reset(tree)
