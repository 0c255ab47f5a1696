"""Tests for motion constancy analysis."""

from __future__ import annotations

from collections.abc import Callable

from blendfold.core.config.models import AnalysisConfig
from blendfold.core.motion.analyzer import MotionAnalyzer, is_constant
from blendfold.core.motion.models import (
    BlendTree,
    BlendTreeType,
    ChildMotion,
    Clip,
    FloatCurve,
    Keyframe,
    ReferenceCurve,
    ReferenceKeyframe,
)


class TestIsConstant:
    """Tests for is_constant."""

    def test_none_is_constant(self):
        """Absence of motion imposes no constraint."""
        assert is_constant(None) is True

    def test_empty_clip(self):
        assert is_constant(Clip(name="Empty")) is True

    def test_single_key_clip(self, make_clip: Callable[..., Clip]):
        assert is_constant(make_clip("On")) is True

    def test_animated_clip(self, make_clip: Callable[..., Clip]):
        assert is_constant(make_clip("Fade", animated=True)) is False

    def test_equal_keys_are_constant(self):
        """Several keys with the same value and flat tangents are constant."""
        curve = FloatCurve(
            property_name="x",
            keys=[Keyframe(time=0.0, value=2.0), Keyframe(time=1.0, value=2.0)],
        )
        assert is_constant(Clip(name="Hold", length=1.0, curves=[curve])) is True

    def test_overshoot_between_equal_keys(self):
        """Tangents bulging between equal keys are caught at the midpoint."""
        curve = FloatCurve(
            property_name="x",
            keys=[
                Keyframe(time=0.0, value=0.0, out_tangent=5.0),
                Keyframe(time=1.0, value=0.0, in_tangent=-5.0),
            ],
        )
        assert is_constant(Clip(name="Bump", length=1.0, curves=[curve])) is False

    def test_reference_swap(self):
        """A reference curve switching objects is not constant."""
        curve = ReferenceCurve(
            property_name="m_Materials.Array.data[0]",
            keys=[ReferenceKeyframe(time=0.0, value="Red"), ReferenceKeyframe(time=1.0, value="Blue")],
        )
        assert is_constant(Clip(name="Swap", reference_curves=[curve])) is False

    def test_reference_repeated_value(self):
        curve = ReferenceCurve(
            property_name="m_Materials.Array.data[0]",
            keys=[ReferenceKeyframe(time=0.0, value="Red"), ReferenceKeyframe(time=1.0, value="Red")],
        )
        assert is_constant(Clip(name="Hold", reference_curves=[curve])) is True

    def test_blend_tree_with_nested_animated_clip(self, make_clip: Callable[..., Clip]):
        """One animated descendant makes the whole tree non-constant."""
        inner = BlendTree(
            name="Inner",
            children=[ChildMotion(motion=make_clip("A")), ChildMotion(motion=make_clip("B", animated=True))],
        )
        outer = BlendTree(
            name="Outer",
            blend_type=BlendTreeType.DIRECT,
            children=[ChildMotion(motion=make_clip("C")), ChildMotion(motion=inner), ChildMotion()],
        )
        assert is_constant(outer) is False

    def test_blend_tree_of_constant_clips(self, make_clip: Callable[..., Clip]):
        tree = BlendTree(children=[ChildMotion(motion=make_clip("A")), ChildMotion()])
        assert is_constant(tree) is True


def test_tolerance_is_configurable(make_clip: Callable[..., Clip]):
    """A wide tolerance treats small animation as constant."""
    analyzer = MotionAnalyzer(AnalysisConfig(constancy_tolerance=2.0))
    assert analyzer.is_constant(make_clip("Fade", animated=True)) is True
