"""Motion models and analysis."""

from blendfold.core.motion.analyzer import MotionAnalyzer, is_constant
from blendfold.core.motion.models import (
    BlendTree,
    BlendTreeType,
    ChildMotion,
    Clip,
    FloatCurve,
    Keyframe,
    Motion,
    ReferenceCurve,
    ReferenceKeyframe,
)
from blendfold.core.motion.slicing import ClipFrame, slice_clip_frames

__all__ = [
    "BlendTree",
    "BlendTreeType",
    "ChildMotion",
    "Clip",
    "ClipFrame",
    "FloatCurve",
    "Keyframe",
    "Motion",
    "MotionAnalyzer",
    "ReferenceCurve",
    "ReferenceKeyframe",
    "is_constant",
    "slice_clip_frames",
]
