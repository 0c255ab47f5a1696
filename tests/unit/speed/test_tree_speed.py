"""Tests for blend tree speed synchronisation."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from blendfold.core.motion.models import BlendTree, BlendTreeType, ChildMotion, Clip
from blendfold.core.speed.solver import solve_speeds
from blendfold.core.speed.tree import (
    clip_length,
    fix_tree_speed,
    multiply_tree_speed,
    reset_tree_speed,
    tree_length,
)

PHI = solve_speeds([1.0, 1.0])[0]


def _direct(*children: ChildMotion) -> BlendTree:
    return BlendTree(name="Direct", blend_type=BlendTreeType.DIRECT, children=list(children))


def _one_d(*children: ChildMotion) -> BlendTree:
    return BlendTree(name="1D", blend_parameter="Toggle", children=list(children))


class TestClipLength:
    def test_scaled_length(self, make_clip: Callable[..., Clip]):
        assert clip_length(make_clip("A", length=2.0), -4.0) == pytest.approx(0.5)

    def test_zero_time_scale(self, make_clip: Callable[..., Clip]):
        assert clip_length(make_clip("A", length=2.0), 0.0) == 0.0


class TestTreeLength:
    def test_max_of_children(self, make_clip: Callable[..., Clip]):
        """A threshold blend lasts as long as its slowest child."""
        tree = _one_d(
            ChildMotion(motion=make_clip("A", length=1.0)),
            ChildMotion(motion=make_clip("B", length=4.0), time_scale=2.0),
        )
        assert tree_length(tree) == pytest.approx(2.0)

    def test_nested_direct_tree_is_summed(self, make_clip: Callable[..., Clip]):
        inner = _direct(
            ChildMotion(motion=make_clip("A", length=1.0)),
            ChildMotion(motion=make_clip("B", length=2.0)),
        )
        tree = _one_d(ChildMotion(motion=inner), ChildMotion(motion=make_clip("C", length=1.0)))
        assert tree_length(tree) == pytest.approx(3.0)


class TestFixTreeSpeed:
    """Tests for fix_tree_speed."""

    def test_equal_clips(self, make_clip: Callable[..., Clip]):
        tree = _direct(
            ChildMotion(motion=make_clip("A")),
            ChildMotion(motion=make_clip("B")),
        )
        fixed, total = fix_tree_speed(tree)
        assert total == pytest.approx(2.0)
        assert [c.time_scale for c in fixed.children] == pytest.approx([PHI, PHI])

    def test_direction_preserved(self, make_clip: Callable[..., Clip]):
        """A reversed clip stays reversed."""
        tree = _direct(
            ChildMotion(motion=make_clip("A"), time_scale=-1.0),
            ChildMotion(motion=make_clip("B")),
        )
        fixed, _ = fix_tree_speed(tree)
        assert [c.time_scale for c in fixed.children] == pytest.approx([-PHI, PHI])

    def test_input_untouched(self, make_clip: Callable[..., Clip]):
        tree = _direct(ChildMotion(motion=make_clip("A")), ChildMotion(motion=make_clip("B")))
        fix_tree_speed(tree)
        assert [c.time_scale for c in tree.children] == [1.0, 1.0]

    def test_nested_direct_fixed_first(self, make_clip: Callable[..., Clip]):
        """Nested direct trees are solved, then scaled by the parent multiplier."""
        inner = _direct(ChildMotion(motion=make_clip("A")), ChildMotion(motion=make_clip("B")))
        tree = _direct(
            ChildMotion(motion=make_clip("C", length=2.0)),
            ChildMotion(motion=inner),
        )
        fixed, total = fix_tree_speed(tree)

        assert total == pytest.approx(4.0)
        assert fixed.children[0].time_scale == pytest.approx(PHI)
        assert fixed.children[1].time_scale == 1.0
        nested = fixed.children[1].motion
        assert [c.time_scale for c in nested.children] == pytest.approx([PHI * PHI, PHI * PHI])

    def test_threshold_child_uses_max_length(self, make_clip: Callable[..., Clip]):
        one_d = _one_d(
            ChildMotion(motion=make_clip("A", length=1.0)),
            ChildMotion(motion=make_clip("B", length=4.0), time_scale=2.0),
        )
        tree = _direct(ChildMotion(motion=make_clip("C", length=1.0)), ChildMotion(motion=one_d))
        fixed, _ = fix_tree_speed(tree)

        expected = solve_speeds([1.0, 2.0])
        assert fixed.children[0].time_scale == pytest.approx(expected[0])
        scaled = [c.time_scale for c in fixed.children[1].motion.children]
        assert scaled == pytest.approx([expected[1], 2.0 * expected[1]])

    def test_empty_slots_skipped(self, make_clip: Callable[..., Clip]):
        tree = _direct(ChildMotion(), ChildMotion(motion=make_clip("A", length=3.0)))
        fixed, total = fix_tree_speed(tree)
        assert total == pytest.approx(3.0)
        assert fixed.children[0].motion is None
        assert fixed.children[1].time_scale == pytest.approx(1.0)

    def test_empty_tree(self):
        fixed, total = fix_tree_speed(_direct())
        assert fixed.children == []
        assert total == 0


class TestMultiplyAndReset:
    def test_multiply_scales_leaves_only(self, make_clip: Callable[..., Clip]):
        inner = _one_d(ChildMotion(motion=make_clip("A"), time_scale=2.0))
        tree = _direct(ChildMotion(motion=inner, time_scale=1.0))
        scaled = multiply_tree_speed(tree, 3.0)
        assert scaled.children[0].time_scale == pytest.approx(1.0)
        assert scaled.children[0].motion.children[0].time_scale == pytest.approx(6.0)

    def test_deep_nesting_does_not_compound(self, make_clip: Callable[..., Clip]):
        """A leaf two threshold trees down gets the multiplier exactly once."""
        innermost = _one_d(ChildMotion(motion=make_clip("A", length=1.0)))
        middle = _one_d(ChildMotion(motion=innermost))
        tree = _direct(
            ChildMotion(motion=make_clip("B", length=1.0)),
            ChildMotion(motion=middle),
        )
        fixed, _ = fix_tree_speed(tree)

        assert fixed.children[0].time_scale == pytest.approx(PHI)
        middle_entry = fixed.children[1]
        assert middle_entry.time_scale == 1.0
        inner_entry = middle_entry.motion.children[0]
        assert inner_entry.time_scale == 1.0
        assert inner_entry.motion.children[0].time_scale == pytest.approx(PHI)

    def test_reset(self, make_clip: Callable[..., Clip]):
        inner = _one_d(ChildMotion(motion=make_clip("A"), time_scale=-2.0))
        tree = _direct(ChildMotion(motion=inner, time_scale=5.0))
        reset = reset_tree_speed(tree)
        assert reset.children[0].time_scale == 5.0
        assert reset.children[0].motion.children[0].time_scale == 1.0
